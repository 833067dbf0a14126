"""Bar (candlestick) data model."""

import math

from pydantic import BaseModel, ConfigDict


class Bar(BaseModel):
    """One OHLCV observation.

    Price fields that could not be parsed are stored as NaN and are
    treated as absent at that index by every consumer.
    """

    model_config = ConfigDict(frozen=True)

    time: int  # Unix timestamp in seconds
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    @property
    def is_valid(self) -> bool:
        """Check that all price fields are finite."""
        return all(math.isfinite(v) for v in (self.open, self.high, self.low, self.close))
