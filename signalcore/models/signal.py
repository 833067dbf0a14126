"""Signal, divergence and alert data models."""

import hashlib
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Action(str, Enum):
    """Trade action emitted by the fusion engine."""

    BUY = "BUY"
    SELL = "SELL"


class DivergenceKind(str, Enum):
    """Divergence polarity."""

    BULLISH = "BULLISH"  # price lower low, oscillator higher low
    BEARISH = "BEARISH"  # price higher high, oscillator lower high


class Reason(str, Enum):
    """Closed set of rationale labels a signal can carry."""

    EMA_CROSS_BUY = "EMA_CROSS_BUY"
    EMA_CROSS_SELL = "EMA_CROSS_SELL"
    RSI_OVERSOLD = "RSI_OVERSOLD"
    RSI_OVERBOUGHT = "RSI_OVERBOUGHT"
    MACD_CROSS_BUY = "MACD_CROSS_BUY"
    MACD_CROSS_SELL = "MACD_CROSS_SELL"
    MACD_HISTOGRAM_BUY = "MACD_HISTOGRAM_BUY"
    MACD_HISTOGRAM_SELL = "MACD_HISTOGRAM_SELL"
    BB_LOWER_TOUCH = "BB_LOWER_TOUCH"
    BB_UPPER_TOUCH = "BB_UPPER_TOUCH"
    BB_LOWER_BREAKOUT = "BB_LOWER_BREAKOUT"
    BB_UPPER_BREAKOUT = "BB_UPPER_BREAKOUT"
    BB_SQUEEZE = "BB_SQUEEZE"
    BULLISH_DIVERGENCE = "BULLISH_DIVERGENCE"
    BEARISH_DIVERGENCE = "BEARISH_DIVERGENCE"

    @property
    def side(self) -> Action:
        """Side of the decision this reason votes for."""
        return _REASON_SIDES[self]

    @property
    def label(self) -> str:
        """Human-readable description."""
        return _REASON_LABELS[self]


_REASON_SIDES: dict[Reason, Action] = {
    Reason.EMA_CROSS_BUY: Action.BUY,
    Reason.EMA_CROSS_SELL: Action.SELL,
    Reason.RSI_OVERSOLD: Action.BUY,
    Reason.RSI_OVERBOUGHT: Action.SELL,
    Reason.MACD_CROSS_BUY: Action.BUY,
    Reason.MACD_CROSS_SELL: Action.SELL,
    Reason.MACD_HISTOGRAM_BUY: Action.BUY,
    Reason.MACD_HISTOGRAM_SELL: Action.SELL,
    Reason.BB_LOWER_TOUCH: Action.BUY,
    Reason.BB_UPPER_TOUCH: Action.SELL,
    Reason.BB_LOWER_BREAKOUT: Action.BUY,
    Reason.BB_UPPER_BREAKOUT: Action.SELL,
    Reason.BB_SQUEEZE: Action.BUY,  # volatility contraction, BUY by convention
    Reason.BULLISH_DIVERGENCE: Action.BUY,
    Reason.BEARISH_DIVERGENCE: Action.SELL,
}

_REASON_LABELS: dict[Reason, str] = {
    Reason.EMA_CROSS_BUY: "Fast EMA crossed above slow EMA",
    Reason.EMA_CROSS_SELL: "Fast EMA crossed below slow EMA",
    Reason.RSI_OVERSOLD: "RSI at or below oversold level",
    Reason.RSI_OVERBOUGHT: "RSI at or above overbought level",
    Reason.MACD_CROSS_BUY: "MACD crossed above signal line",
    Reason.MACD_CROSS_SELL: "MACD crossed below signal line",
    Reason.MACD_HISTOGRAM_BUY: "MACD histogram above threshold",
    Reason.MACD_HISTOGRAM_SELL: "MACD histogram below negative threshold",
    Reason.BB_LOWER_TOUCH: "Close at or below lower Bollinger band",
    Reason.BB_UPPER_TOUCH: "Close at or above upper Bollinger band",
    Reason.BB_LOWER_BREAKOUT: "Close broke below lower Bollinger band",
    Reason.BB_UPPER_BREAKOUT: "Close broke above upper Bollinger band",
    Reason.BB_SQUEEZE: "Bollinger band width below squeeze threshold",
    Reason.BULLISH_DIVERGENCE: "Bullish price/oscillator divergence",
    Reason.BEARISH_DIVERGENCE: "Bearish price/oscillator divergence",
}


class AlertType(str, Enum):
    """Level-crossing event types."""

    OVERBOUGHT_ENTER = "OVERBOUGHT_ENTER"
    OVERSOLD_ENTER = "OVERSOLD_ENTER"
    PRE_OVERSOLD = "PRE_OVERSOLD"
    CROSS_UP_50 = "CROSS_UP_50"
    CROSS_DOWN_50 = "CROSS_DOWN_50"
    MACD_CROSS_UP = "MACD_CROSS_UP"
    MACD_CROSS_DOWN = "MACD_CROSS_DOWN"
    MACD_ZERO_UP = "MACD_ZERO_UP"
    MACD_ZERO_DOWN = "MACD_ZERO_DOWN"
    MACD_HIST_FLIP_UP = "MACD_HIST_FLIP_UP"
    MACD_HIST_FLIP_DOWN = "MACD_HIST_FLIP_DOWN"


def _generate_signal_id(time: int, action: Action) -> str:
    """Generate deterministic signal ID from bar time and action.

    Recomputing the same series produces the same IDs, so a downstream
    store can upsert instead of duplicating.
    """
    key = f"{time}:{action.value}"
    return hashlib.sha256(key.encode()).hexdigest()[:32]


class Signal(BaseModel):
    """A fused trading signal for one bar."""

    id: str = ""  # Will be set in model_post_init
    time: int
    action: Action
    reasons: list[Reason]
    confidence: float = Field(ge=0.0, le=1.0)
    price: float
    context: dict[str, float | None] = Field(default_factory=dict)

    def model_post_init(self, __context) -> None:
        """Generate deterministic ID after model initialization."""
        if not self.id:
            object.__setattr__(self, "id", _generate_signal_id(self.time, self.action))

    @property
    def rationale(self) -> list[str]:
        """Human-readable reason labels, in evaluation order."""
        return [r.label for r in self.reasons]


class Divergence(BaseModel):
    """Price/oscillator divergence across two matched pivot pairs."""

    model_config = ConfigDict(frozen=True)

    kind: DivergenceKind
    price_index1: int
    price_index2: int
    indicator_index1: int
    indicator_index2: int
    price_value1: float
    price_value2: float
    indicator_value1: float
    indicator_value2: float
    price_delta_pct: float
    indicator_delta_pct: float
    score: float

    @property
    def is_bullish(self) -> bool:
        return self.kind == DivergenceKind.BULLISH

    @property
    def action(self) -> Action:
        """Side implied by the divergence."""
        return Action.BUY if self.is_bullish else Action.SELL


class AlertEvent(BaseModel):
    """A threshold crossing detected on an oscillator series."""

    model_config = ConfigDict(frozen=True)

    index: int
    time: int | None = None
    type: AlertType
    level: float | None = None
    value: float
