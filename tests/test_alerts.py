"""Tests for oscillator and MACD alert evaluation."""

from signalcore.alerts import evaluate_alerts, evaluate_macd_alerts
from signalcore.models import AlertLevels, AlertType, IndicatorPoint


def _types(alerts) -> list[tuple[int, AlertType]]:
    return [(a.index, a.type) for a in alerts]


class TestEvaluateAlerts:
    """Tests for RSI-style level alerts."""

    def test_reference_sequence(self):
        rsi = [45, 52, 68, 81, 77, 48, 32, 18, 25, 41, 55]

        alerts = evaluate_alerts(rsi)

        assert _types(alerts) == [
            (1, AlertType.CROSS_UP_50),
            (3, AlertType.OVERBOUGHT_ENTER),
            (5, AlertType.CROSS_DOWN_50),
            (7, AlertType.OVERSOLD_ENTER),
            (7, AlertType.PRE_OVERSOLD),
            (10, AlertType.CROSS_UP_50),
        ]
        assert alerts[1].level == 80.0
        assert alerts[1].value == 81

    def test_landing_on_level_counts(self):
        """Reaching the level exactly is an entry; leaving from it is not."""
        alerts = evaluate_alerts([79, 80, 79, 80])

        assert _types(alerts) == [(1, AlertType.OVERBOUGHT_ENTER), (3, AlertType.OVERBOUGHT_ENTER)]

    def test_staying_beyond_level_is_silent(self):
        assert evaluate_alerts([85, 90, 95]) == []

    def test_absent_values_skipped(self):
        alerts = evaluate_alerts([75, None, 85])

        assert _types(alerts) == [(2, AlertType.OVERBOUGHT_ENTER)]

    def test_leading_absent_values(self):
        alerts = evaluate_alerts([None, None, 45, 55])

        assert _types(alerts) == [(3, AlertType.CROSS_UP_50)]

    def test_optional_rules_disabled(self):
        levels = AlertLevels(use_pre_low=False, watch_midline=False)

        alerts = evaluate_alerts([45, 52, 68, 81, 77, 48, 32, 18], levels)

        assert _types(alerts) == [(3, AlertType.OVERBOUGHT_ENTER), (7, AlertType.OVERSOLD_ENTER)]

    def test_custom_levels(self):
        levels = AlertLevels(high=70, low=30, pre_low=40)

        alerts = evaluate_alerts([60, 71, 45, 39, 29], levels)

        assert _types(alerts) == [
            (1, AlertType.OVERBOUGHT_ENTER),
            (2, AlertType.CROSS_DOWN_50),
            (3, AlertType.PRE_OVERSOLD),
            (4, AlertType.OVERSOLD_ENTER),
        ]

    def test_times_from_points(self):
        series = [IndicatorPoint(time=1000 + i, value=v) for i, v in enumerate([45, 55])]

        alerts = evaluate_alerts(series)

        assert alerts[0].time == 1001

    def test_explicit_times(self):
        alerts = evaluate_alerts([45, 55], times=[10, 20])

        assert alerts[0].time == 20

    def test_without_times(self):
        alerts = evaluate_alerts([45, 55])

        assert alerts[0].time is None

    def test_empty(self):
        assert evaluate_alerts([]) == []


class TestEvaluateMacdAlerts:
    """Tests for MACD cross, zero-line and histogram alerts."""

    def test_cross_up(self):
        alerts = evaluate_macd_alerts(
            line=[-1.0, 1.0],
            signal=[0.0, 0.0],
            histogram=[-1.0, 1.0],
        )

        assert _types(alerts) == [
            (1, AlertType.MACD_CROSS_UP),
            (1, AlertType.MACD_ZERO_UP),
            (1, AlertType.MACD_HIST_FLIP_UP),
        ]

    def test_cross_down(self):
        alerts = evaluate_macd_alerts(
            line=[1.0, -1.0],
            signal=[0.0, 0.0],
            histogram=[1.0, -1.0],
            times=[100, 200],
        )

        assert _types(alerts) == [
            (1, AlertType.MACD_CROSS_DOWN),
            (1, AlertType.MACD_ZERO_DOWN),
            (1, AlertType.MACD_HIST_FLIP_DOWN),
        ]
        assert all(a.time == 200 for a in alerts)

    def test_cross_above_zero_without_zero_crossing(self):
        alerts = evaluate_macd_alerts(
            line=[2.0, 3.0],
            signal=[2.5, 2.5],
            histogram=[-0.5, 0.5],
        )

        assert _types(alerts) == [
            (1, AlertType.MACD_CROSS_UP),
            (1, AlertType.MACD_HIST_FLIP_UP),
        ]

    def test_warmup_values_ignored(self):
        alerts = evaluate_macd_alerts(
            line=[None, -1.0, 1.0],
            signal=[None, None, 0.0],
            histogram=[None, None, 1.0],
        )

        # Line events need the signal defined on both bars
        assert _types(alerts) == []

    def test_no_change(self):
        alerts = evaluate_macd_alerts([1.0, 1.1], [0.5, 0.6], [0.5, 0.5])

        assert alerts == []
