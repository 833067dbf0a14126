"""Data models shared by every signalcore component."""

from signalcore.models.bar import Bar
from signalcore.models.config import (
    DIVERGENCE_PRESETS,
    AlertLevels,
    AnalysisConfig,
    DivergenceConfig,
    IndicatorConfig,
    ResistanceConfig,
    SignalConfig,
    get_divergence_preset,
    list_divergence_presets,
)
from signalcore.models.series import (
    Crest,
    IndicatorPoint,
    Pivot,
    PivotKind,
    PivotSet,
    LevelSegment,
    ResistanceLevels,
    point_values,
    to_points,
)
from signalcore.models.signal import (
    Action,
    AlertEvent,
    AlertType,
    Divergence,
    DivergenceKind,
    Reason,
    Signal,
)

__all__ = [
    "Bar",
    "IndicatorPoint",
    "Pivot",
    "PivotKind",
    "PivotSet",
    "Crest",
    "LevelSegment",
    "ResistanceLevels",
    "point_values",
    "to_points",
    "Action",
    "AlertEvent",
    "AlertType",
    "Divergence",
    "DivergenceKind",
    "Reason",
    "Signal",
    "DIVERGENCE_PRESETS",
    "AlertLevels",
    "AnalysisConfig",
    "DivergenceConfig",
    "IndicatorConfig",
    "ResistanceConfig",
    "SignalConfig",
    "get_divergence_preset",
    "list_divergence_presets",
]
