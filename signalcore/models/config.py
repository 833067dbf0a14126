"""Computation option bags.

All options are presentation-tunable, so out-of-range values are clamped
to the nearest valid value instead of being rejected. Every model accepts
both snake_case field names and camelCase aliases (``emaFastPeriod``).
"""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

_OPTION_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    extra="ignore",
)


class IndicatorConfig(BaseModel):
    """Indicator periods and price source."""

    model_config = _OPTION_CONFIG

    source: str = "close"

    ema_fast_period: int = 20
    ema_slow_period: int = 50
    sma_period: int = 200
    rsi_period: int = 14

    macd_fast: int = 12
    macd_slow: int = 26
    macd_signal: int = 9

    bb_period: int = 20
    bb_multiplier: float = 2.0

    @field_validator(
        "ema_fast_period",
        "ema_slow_period",
        "sma_period",
        "rsi_period",
        "macd_fast",
        "macd_slow",
        "macd_signal",
        "bb_period",
    )
    @classmethod
    def clamp_period(cls, v: int) -> int:
        return max(1, v)

    @field_validator("bb_multiplier")
    @classmethod
    def clamp_multiplier(cls, v: float) -> float:
        return max(0.0, v)


class SignalConfig(BaseModel):
    """Signal fusion switches and thresholds."""

    model_config = _OPTION_CONFIG

    # Indicator families taking part in the vote
    use_ema: bool = True
    use_rsi: bool = True
    use_macd: bool = True
    use_bollinger: bool = True
    use_divergence: bool = True

    rsi_oversold: float = 30.0
    rsi_overbought: float = 70.0
    macd_histogram_threshold: float = 0.15

    # Band width (upper - lower) / basis below this counts as a squeeze; None disables
    bb_squeeze_threshold: float | None = None

    min_reasons: int = 1

    @field_validator("rsi_oversold", "rsi_overbought")
    @classmethod
    def clamp_rsi_level(cls, v: float) -> float:
        return min(100.0, max(0.0, v))

    @field_validator("macd_histogram_threshold")
    @classmethod
    def clamp_histogram_threshold(cls, v: float) -> float:
        return max(0.0, v)

    @field_validator("bb_squeeze_threshold")
    @classmethod
    def clamp_squeeze_threshold(cls, v: float | None) -> float | None:
        return None if v is None else max(0.0, v)

    @field_validator("min_reasons")
    @classmethod
    def clamp_min_reasons(cls, v: int) -> int:
        return max(1, v)


class DivergenceConfig(BaseModel):
    """Pivot pairing and tolerance settings for divergence search."""

    model_config = _OPTION_CONFIG

    peak_window: int = 5
    min_bars_between_peaks: int = 5
    # None: no upper bound on pivot spacing
    max_bars_between_peaks: int | None = 60
    min_price_change_pct: float = 0.005
    min_indicator_change_pct: float = 0.02
    max_peak_distance: int = 5

    # Only compare adjacent pivots (p[i-1], p[i]) instead of every ordered pair
    consecutive_only: bool = False

    # Require a matched oscillator pivot inside the extreme zone
    use_zones: bool = False
    zone_high: float = 70.0
    zone_low: float = 30.0

    @field_validator("peak_window", "min_bars_between_peaks")
    @classmethod
    def clamp_window(cls, v: int) -> int:
        return max(1, v)

    @field_validator("max_peak_distance")
    @classmethod
    def clamp_distance(cls, v: int) -> int:
        return max(0, v)

    @field_validator("min_price_change_pct", "min_indicator_change_pct")
    @classmethod
    def clamp_pct(cls, v: float) -> float:
        return max(0.0, v)

    @model_validator(mode="after")
    def clamp_bar_range(self) -> DivergenceConfig:
        if (
            self.max_bars_between_peaks is not None
            and self.max_bars_between_peaks < self.min_bars_between_peaks
        ):
            self.max_bars_between_peaks = self.min_bars_between_peaks
        return self


class AlertLevels(BaseModel):
    """Oscillator alert levels."""

    model_config = _OPTION_CONFIG

    high: float = 80.0
    low: float = 20.0
    pre_low: float = 30.0
    midline: float = 50.0
    use_pre_low: bool = True
    watch_midline: bool = True


class ResistanceConfig(BaseModel):
    """Crest-based resistance level settings."""

    model_config = _OPTION_CONFIG

    swing_len: int = 1
    limit: int = 3
    precision: int = 4

    @field_validator("swing_len", "limit")
    @classmethod
    def clamp_positive(cls, v: int) -> int:
        return max(1, v)

    @field_validator("precision")
    @classmethod
    def clamp_precision(cls, v: int) -> int:
        return max(0, v)

# =============================================================================
# Divergence presets
# =============================================================================
# "interactive": every ordered pivot pair within a bounded spacing, used for
# on-screen recomputation.
# "persistence": adjacent pivots only, a minimum spacing but no maximum, used
# when selecting divergences to hand to a signal store.
DIVERGENCE_PRESETS: dict[str, DivergenceConfig] = {
    "interactive": DivergenceConfig(),
    "persistence": DivergenceConfig(
        peak_window=5,
        min_bars_between_peaks=5,
        max_bars_between_peaks=None,
        min_price_change_pct=0.0,
        min_indicator_change_pct=0.0,
        max_peak_distance=5,
        consecutive_only=True,
    ),
}


def get_divergence_preset(name: str) -> DivergenceConfig:
    """Get a copy of a named divergence preset.

    Raises:
        KeyError: If no preset is registered under the given name.
    """
    preset = DIVERGENCE_PRESETS.get(name)
    if preset is None:
        available = ", ".join(sorted(DIVERGENCE_PRESETS.keys()))
        raise KeyError(f"Unknown divergence preset '{name}'. Available: {available}")
    return preset.model_copy()


def list_divergence_presets() -> list[str]:
    """Return a sorted list of preset names."""
    return sorted(DIVERGENCE_PRESETS.keys())


def _pick_fields(model: type[BaseModel], options: Mapping[str, Any]) -> dict[str, Any]:
    """Select the options belonging to ``model``, keyed by field name."""
    picked: dict[str, Any] = {}
    for name, info in model.model_fields.items():
        if name in options:
            picked[name] = options[name]
        elif info.alias and info.alias in options:
            picked[name] = options[info.alias]
    return picked


class AnalysisConfig(BaseModel):
    """Every option the analysis pipeline recognizes, grouped by component."""

    indicators: IndicatorConfig = Field(default_factory=IndicatorConfig)
    signals: SignalConfig = Field(default_factory=SignalConfig)
    divergence: DivergenceConfig = Field(default_factory=DivergenceConfig)
    alerts: AlertLevels = Field(default_factory=AlertLevels)
    resistance: ResistanceConfig = Field(default_factory=ResistanceConfig)

    @classmethod
    def from_options(
        cls,
        options: Mapping[str, Any] | None = None,
        preset: str = "interactive",
    ) -> AnalysisConfig:
        """Build a config from a flat option bag.

        Keys may be snake_case or camelCase. Divergence options override
        the values of the named preset.

        Args:
            options: Flat mapping such as ``{"emaFastPeriod": 10, "minReasons": 2}``
            preset: Divergence preset the overrides start from

        Returns:
            AnalysisConfig with defaults for everything not given
        """
        options = options or {}
        base = get_divergence_preset(preset).model_dump()
        base.update(_pick_fields(DivergenceConfig, options))
        return cls(
            indicators=IndicatorConfig(**_pick_fields(IndicatorConfig, options)),
            signals=SignalConfig(**_pick_fields(SignalConfig, options)),
            divergence=DivergenceConfig(**base),
            alerts=AlertLevels(**_pick_fields(AlertLevels, options)),
            resistance=ResistanceConfig(**_pick_fields(ResistanceConfig, options)),
        )
