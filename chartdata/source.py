from __future__ import annotations

import logging
import urllib.error
import urllib.request
from pathlib import Path
from typing import Union

DEFAULT_TIMEOUT = 10.0

__all__ = ["AcquisitionError", "DEFAULT_TIMEOUT", "decode_upload", "read_csv_source"]


class AcquisitionError(ValueError):
    """Raised when the CSV text itself could not be obtained."""


def _is_url(source: Union[str, Path]) -> bool:
    return isinstance(source, str) and source.lower().startswith(("http://", "https://"))


def _fetch_url(url: str, timeout: float) -> str:
    logging.info("Fetching %s", url)
    try:
        with urllib.request.urlopen(url, timeout=timeout) as response:
            return decode_upload(response.read())
    except urllib.error.HTTPError as exc:
        raise AcquisitionError(f"HTTP error! status: {exc.code}") from exc
    except urllib.error.URLError as exc:
        raise AcquisitionError(f"Failed to fetch {url}: {exc.reason}") from exc


def read_csv_source(source: Union[str, Path], timeout: float = DEFAULT_TIMEOUT) -> str:
    """Return the raw CSV text behind ``source`` (file path or http(s) URL).

    One attempt only; any failure surfaces as ``AcquisitionError``.
    """
    if _is_url(source):
        return _fetch_url(str(source), timeout)

    path = Path(source)
    if not path.is_file():
        raise AcquisitionError(f"CSV file not found: {path.name}")
    try:
        return decode_upload(path.read_bytes())
    except OSError as exc:
        raise AcquisitionError(f"Failed to read {path.name}: {exc}") from exc


def decode_upload(raw: bytes) -> str:
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise AcquisitionError("CSV file is not valid UTF-8 text") from exc
