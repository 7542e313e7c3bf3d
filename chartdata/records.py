from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Union

__all__ = ["Candle"]


@dataclass(frozen=True)
class Candle:
    """One traded period, normalized for the chart."""

    time: int
    open: float
    high: float
    low: float
    close: float
    volume: int = 0

    @property
    def is_up(self) -> bool:
        return self.close > self.open

    @property
    def iso_time(self) -> str:
        stamp = datetime.fromtimestamp(self.time, tz=timezone.utc)
        return stamp.strftime("%Y-%m-%dT%H:%M:%S.000Z")

    def to_payload(self) -> Dict[str, Union[int, float]]:
        return {
            "time": self.time,
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
        }
