from __future__ import annotations

import math
from typing import Optional

import pandas as pd

# Offset suffix of the exported data.csv rows; those rows are read as UTC.
LEGACY_UTC_OFFSET = "-05:00"

__all__ = ["LEGACY_UTC_OFFSET", "parse_datetime"]


def parse_datetime(value: str, utc_alias: Optional[str] = LEGACY_UTC_OFFSET) -> int:
    """Convert a datetime string into unix seconds.

    Args:
        value: ``YYYY-MM-DD HH:MM:SS[±HH:MM]``, any ISO-8601 string pandas
            understands, or plain epoch seconds. An all-digit value is always
            epoch seconds, so a compact date such as ``20260201`` reads as
            1970-08-23, not 2026-02-01.
        utc_alias: Offset suffix that is rewritten to ``Z`` before parsing.
            ``None`` keeps every offset as written.

    Returns:
        Whole seconds since the epoch (floored).

    Raises:
        ValueError: If the value is empty or not a valid instant. Text that
            does not start with a digit (``now``, ``today``) is rejected.
    """
    text = str(value).strip()
    if not text:
        raise ValueError("empty datetime")
    if text.isdigit():
        return int(text)
    if not text[0].isdigit():
        raise ValueError(f"invalid datetime: {value!r}")

    if utc_alias and text.endswith(utc_alias):
        text = text[: -len(utc_alias)] + "Z"

    try:
        stamp = pd.Timestamp(text)
    except (TypeError, OverflowError) as exc:
        raise ValueError(f"invalid datetime: {value!r}") from exc
    if pd.isna(stamp):
        raise ValueError(f"invalid datetime: {value!r}")

    if stamp.tzinfo is None:
        stamp = stamp.tz_localize("UTC")
    return math.floor(stamp.timestamp())
