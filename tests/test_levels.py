"""Tests for crest-based resistance levels."""

from signalcore.levels import detect_resistance_levels
from signalcore.models import Bar


def _make_bars(highs: list[float], start: int = 1_700_000_000, step: int = 60) -> list[Bar]:
    """Create bars from a list of highs; other prices sit just below."""
    return [
        Bar(time=start + i * step, open=h - 1, high=h, low=h - 2, close=h - 0.5)
        for i, h in enumerate(highs)
    ]


class TestDetectResistanceLevels:
    """Tests for detect_resistance_levels."""

    def test_top_levels_highest_first(self):
        bars = _make_bars([1, 5, 1, 7, 1, 3, 1, 6, 1])

        result = detect_resistance_levels(bars)

        assert result.levels == [7.0, 6.0, 5.0]
        assert [c.value for c in result.crests] == [7.0, 6.0, 5.0, 3.0]
        assert [c.index for c in result.crests] == [3, 7, 1, 5]

    def test_limit(self):
        bars = _make_bars([1, 5, 1, 7, 1, 3, 1, 6, 1])

        assert detect_resistance_levels(bars, limit=2).levels == [7.0, 6.0]
        assert detect_resistance_levels(bars, limit=10).levels == [7.0, 6.0, 5.0, 3.0]

    def test_duplicates_merged_at_precision(self):
        bars = _make_bars([1, 5.00001, 1, 5.00002, 1, 3, 1])

        assert detect_resistance_levels(bars, precision=4).levels == [5.00002, 3.0]
        assert detect_resistance_levels(bars, precision=5).levels == [5.00002, 5.00001, 3.0]

    def test_segment_spans_neighbors(self):
        bars = _make_bars([1, 5, 1, 7, 1])

        result = detect_resistance_levels(bars, limit=1)

        assert len(result.segments) == 1
        segment = result.segments[0]
        assert segment.level == 7.0
        assert segment.start == bars[2].time
        assert segment.end == bars[4].time
        assert segment.to_dict() == {"level": 7.0, "from": bars[2].time, "to": bars[4].time}

    def test_crest_times(self):
        bars = _make_bars([1, 5, 1])

        result = detect_resistance_levels(bars)

        assert result.crests[0].time == bars[1].time

    def test_swing_len(self):
        bars = _make_bars([1, 2, 1, 3, 1, 2, 1, 5, 1, 2, 1])

        assert detect_resistance_levels(bars, swing_len=1).levels == [5.0, 3.0, 2.0]
        assert detect_resistance_levels(bars, swing_len=3).levels == [5.0, 3.0]

    def test_malformed_high_never_a_crest(self):
        bars = _make_bars([1, 5, 1, 7, 1])
        bars[3] = Bar(time=bars[3].time, open=1, high=float("nan"), low=0, close=1)

        result = detect_resistance_levels(bars)

        assert result.levels == [5.0]

    def test_no_crests(self):
        result = detect_resistance_levels(_make_bars([3.0] * 10))

        assert result.levels == []
        assert result.segments == []
        assert result.to_dict() == {"levels": [], "crests": [], "segments": []}

    def test_empty(self):
        result = detect_resistance_levels([])

        assert result.levels == []
        assert result.crests == []
