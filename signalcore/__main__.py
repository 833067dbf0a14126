"""CLI entry point: run the analysis pipeline over a JSON file of bars.

Usage:
    python -m signalcore bars.json
    python -m signalcore bars.json --preset persistence --output result.json
    python -m signalcore bars.json --config '{"emaFastPeriod": 10, "minReasons": 2}'
    python -m signalcore bars.json --signals-only
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

import orjson

from signalcore.models.config import AnalysisConfig, list_divergence_presets
from signalcore.pipeline import analyze
from signalcore.settings import get_settings

logger = logging.getLogger("signalcore")


def _orjson_dumps(obj: Any) -> bytes:
    """Serialize object to indented JSON bytes using orjson."""
    return orjson.dumps(obj, default=str, option=orjson.OPT_INDENT_2)


def load_records(path: Path) -> list:
    """Read bar records from a JSON array or an object with ``data``/``candles``."""
    payload = orjson.loads(path.read_bytes())
    if isinstance(payload, dict):
        payload = payload.get("data") or payload.get("candles") or []
    if not isinstance(payload, list):
        raise ValueError(f"{path}: expected a list of bar records")
    return payload


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="signalcore",
        description="Compute indicators, divergences and fused signals for a bar series",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m signalcore bars.json
  python -m signalcore bars.json --preset persistence --output result.json
  python -m signalcore bars.json --config '{"rsiOversold": 25}'
        """,
    )
    parser.add_argument("input", type=Path, help="JSON file with bar records")
    parser.add_argument(
        "--preset",
        choices=list_divergence_presets(),
        default=settings.divergence_preset,
        help=f"Divergence preset (default: {settings.divergence_preset})",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="JSON object of options (camelCase or snake_case keys)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the result to this file instead of stdout",
    )
    parser.add_argument(
        "--signals-only",
        action="store_true",
        help="Only output signals and divergences",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = get_settings()

    # Configure logging
    level = logging.DEBUG if args.verbose else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        records = load_records(args.input)
        options = orjson.loads(args.config) if args.config else {}
    except (OSError, ValueError) as e:
        logger.error(f"Cannot read input: {e}")
        return 1

    if not isinstance(options, dict):
        logger.error("--config must be a JSON object")
        return 1

    try:
        config = AnalysisConfig.from_options(options, preset=args.preset)
    except ValueError as e:
        logger.error(f"Invalid options: {e}")
        return 1

    result = analyze(records, config)

    payload = result.to_dict()
    if args.signals_only:
        payload = {
            "signals": payload["signals"],
            "divergences": payload["divergences"],
            "strong_divergences": payload["strong_divergences"],
        }

    data = _orjson_dumps(payload)
    if args.output:
        args.output.write_bytes(data)
        logger.info(f"Wrote {len(data)} bytes to {args.output}")
    else:
        sys.stdout.write(data.decode("utf-8") + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
