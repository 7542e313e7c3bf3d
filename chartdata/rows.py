"""Row parsing for OHLCV CSV text.

Two tokenizers feed the same coercion step:

* ``parse_csv_text`` splits on newlines and commas, positional columns
  ``Datetime, Open, High, Low, Close, Volume``. Used for the ``data.csv``
  resource.
* ``parse_csv_frame`` hands tokenizing to ``pandas.read_csv`` and picks the
  columns by header name. Used for uploaded files.

Bad rows are dropped one by one; only an empty result is fatal, and that is
left to ``require_candles`` so callers decide when to fail.
"""

from __future__ import annotations

import io
import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

import pandas as pd

from chartdata.records import Candle
from chartdata.timeparse import LEGACY_UTC_OFFSET, parse_datetime

MIN_COLUMNS = 6
NO_VALID_DATA_MESSAGE = "No valid data found in the CSV file"

# Header names accepted by the upload tokenizer, compared case-insensitively.
COLUMN_ALIASES: Dict[str, Iterable[str]] = {
    "time": ("datetime", "date", "time", "timestamp"),
    "open": ("open",),
    "high": ("high",),
    "low": ("low",),
    "close": ("close",),
    "volume": ("volume", "vol"),
}
REQUIRED_FIELDS = ("time", "open", "high", "low", "close")

# Plain decimal or exponent notation; no digit separators, no inf/nan words.
NUMBER_PATTERN = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

__all__ = [
    "MIN_COLUMNS",
    "NoValidDataError",
    "ParsedFrame",
    "build_candle",
    "parse_csv_frame",
    "parse_csv_text",
    "require_candles",
]


class NoValidDataError(ValueError):
    """Raised when a load produced zero usable rows."""

    def __init__(self, message: str = NO_VALID_DATA_MESSAGE) -> None:
        super().__init__(message)


@dataclass
class ParsedFrame:
    candles: List[Candle] = field(default_factory=list)
    has_volume: bool = False


def _parse_price(value: Any, name: str) -> float:
    text = str(value).strip()
    if not NUMBER_PATTERN.fullmatch(text):
        raise ValueError(f"{name} is not a number: {value!r}")
    number = float(text)
    if not math.isfinite(number):
        raise ValueError(f"{name} is not finite: {value!r}")
    return number


def _parse_volume(value: Any) -> int:
    if value is None:
        return 0
    text = str(value).strip()
    if not NUMBER_PATTERN.fullmatch(text):
        return 0
    try:
        volume = int(text)
    except ValueError:
        try:
            volume = int(float(text))
        except (ValueError, OverflowError):
            return 0
    return volume if volume >= 0 else 0


def build_candle(
    time: Any,
    open: Any,
    high: Any,
    low: Any,
    close: Any,
    volume: Any = None,
    utc_alias: Optional[str] = LEGACY_UTC_OFFSET,
) -> Candle:
    """Coerce raw field values into a ``Candle``.

    Raises:
        ValueError: If the time or any of open/high/low/close is invalid.
            Volume never raises; it falls back to 0.
    """
    return Candle(
        time=parse_datetime(time, utc_alias=utc_alias),
        open=_parse_price(open, "open"),
        high=_parse_price(high, "high"),
        low=_parse_price(low, "low"),
        close=_parse_price(close, "close"),
        volume=_parse_volume(volume),
    )


def parse_csv_text(
    text: str,
    min_columns: int = MIN_COLUMNS,
    utc_alias: Optional[str] = LEGACY_UTC_OFFSET,
) -> List[Candle]:
    """Parse positional CSV text into candles, preserving input order."""
    rows = text.split("\n")
    candles: List[Candle] = []

    # Row 0 is the header.
    for index in range(1, len(rows)):
        row = rows[index].strip()
        if not row:
            continue

        values = row.split(",")
        if len(values) < min_columns:
            logging.debug("Row %d has %d columns; skipping", index, len(values))
            continue

        try:
            candle = build_candle(*values[:6], utc_alias=utc_alias)
        except ValueError as exc:
            logging.warning("Error parsing row %d: %s", index, exc)
            continue
        candles.append(candle)

    return candles


def _resolve_columns(columns: Sequence[str]) -> Dict[str, str]:
    lookup = {str(col).strip().lower(): col for col in columns}
    resolved: Dict[str, str] = {}
    for canonical, aliases in COLUMN_ALIASES.items():
        for alias in aliases:
            if alias in lookup:
                resolved[canonical] = lookup[alias]
                break
    return resolved


def parse_csv_frame(text: str, utc_alias: Optional[str] = None) -> ParsedFrame:
    """Parse header-keyed CSV text with pandas as the tokenizer."""
    try:
        frame = pd.read_csv(
            io.StringIO(text),
            dtype=str,
            index_col=False,
            keep_default_na=False,
            skip_blank_lines=True,
            on_bad_lines="skip",
        )
    except pd.errors.EmptyDataError:
        return ParsedFrame()

    columns = _resolve_columns(frame.columns)
    missing = [name for name in REQUIRED_FIELDS if name not in columns]
    if missing:
        logging.warning("CSV header is missing columns: %s", ", ".join(missing))
        return ParsedFrame()

    volume_column = columns.get("volume")
    parsed = ParsedFrame(has_volume=volume_column is not None)
    for position, record in enumerate(frame.to_dict("records"), start=1):
        try:
            candle = build_candle(
                record[columns["time"]],
                record[columns["open"]],
                record[columns["high"]],
                record[columns["low"]],
                record[columns["close"]],
                record[volume_column] if volume_column else None,
                utc_alias=utc_alias,
            )
        except ValueError as exc:
            logging.warning("Error parsing row %d: %s", position, exc)
            continue
        parsed.candles.append(candle)

    return parsed


def require_candles(candles: List[Candle]) -> List[Candle]:
    if not candles:
        raise NoValidDataError()
    return candles
