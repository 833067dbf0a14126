"""Series data models using slotted dataclasses.

Indicator series are long and rebuilt on every call, so these models use
``@dataclass(slots=True)`` and plain floats. ``None`` marks positions with
insufficient history (warm-up) or malformed input.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence


class PivotKind(str, Enum):
    """Local extremum polarity."""

    HIGH = "HIGH"
    LOW = "LOW"


@dataclass(slots=True)
class IndicatorPoint:
    """One value of a derived series, aligned by index with its bars."""

    time: int
    value: float | None

    @property
    def is_defined(self) -> bool:
        return self.value is not None

    def to_dict(self) -> dict:
        return {"time": self.time, "value": self.value}


@dataclass(frozen=True, slots=True)
class Pivot:
    """A local extremum found in a numeric series."""

    index: int
    value: float
    kind: PivotKind

    def to_dict(self) -> dict:
        return {"index": self.index, "value": self.value, "kind": self.kind.value}


@dataclass(slots=True)
class PivotSet:
    """High and low pivots of a series, each ordered by index."""

    highs: list[Pivot] = field(default_factory=list)
    lows: list[Pivot] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.highs) + len(self.lows)

    def to_dict(self) -> dict:
        return {
            "highs": [p.to_dict() for p in self.highs],
            "lows": [p.to_dict() for p in self.lows],
        }


@dataclass(frozen=True, slots=True)
class Crest:
    """A HIGH pivot of the bar highs, with the bar time it sits on."""

    index: int
    value: float
    time: int

    def to_dict(self) -> dict:
        return {"index": self.index, "value": self.value, "time": self.time}


@dataclass(frozen=True, slots=True)
class LevelSegment:
    """Time span drawn for a resistance level (the crest bar and its neighbors)."""

    level: float
    start: int
    end: int

    def to_dict(self) -> dict:
        return {"level": self.level, "from": self.start, "to": self.end}


@dataclass(slots=True)
class ResistanceLevels:
    """Strongest distinct crest values, highest first."""

    levels: list[float] = field(default_factory=list)
    crests: list[Crest] = field(default_factory=list)
    segments: list[LevelSegment] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "levels": list(self.levels),
            "crests": [c.to_dict() for c in self.crests],
            "segments": [s.to_dict() for s in self.segments],
        }


def to_points(times: Sequence[int], values: Sequence[float | None]) -> list[IndicatorPoint]:
    """Zip times and values into an IndicatorPoint series.

    Missing trailing values (shorter ``values``) are padded with ``None``.
    """
    return [
        IndicatorPoint(time=t, value=values[i] if i < len(values) else None)
        for i, t in enumerate(times)
    ]


def point_values(series: Sequence) -> list[float | None]:
    """Extract raw values from a series of IndicatorPoints or numbers."""
    return [p.value if isinstance(p, IndicatorPoint) else p for p in series]
