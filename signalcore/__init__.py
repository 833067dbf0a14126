"""Technical-analysis computation core.

Indicators, pivots, divergences, oscillator alerts, resistance levels and
multi-indicator signal fusion over a full bar series. This package contains pure
computation with no I/O dependencies (no database, cache, or network
access); callers own data retrieval and persistence.
"""

from signalcore.alerts import evaluate_alerts, evaluate_macd_alerts
from signalcore.divergence import find_divergences, nearest_pivot, select_strong_divergences
from signalcore.fusion import SignalFusion, fuse_signals
from signalcore.indicators import compute_indicators
from signalcore.levels import detect_resistance_levels
from signalcore.normalizer import normalize_bars
from signalcore.pipeline import AnalysisResult, analyze
from signalcore.pivots import find_pivots

__version__ = "1.0.0"

__all__ = [
    "analyze",
    "AnalysisResult",
    "compute_indicators",
    "detect_resistance_levels",
    "evaluate_alerts",
    "evaluate_macd_alerts",
    "find_divergences",
    "find_pivots",
    "fuse_signals",
    "nearest_pivot",
    "normalize_bars",
    "select_strong_divergences",
    "SignalFusion",
]
