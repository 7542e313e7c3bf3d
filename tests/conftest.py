"""Shared fixtures for the chart app tests."""

from pathlib import Path

import pytest

HEADER = "Datetime,Open,High,Low,Close,Volume"


@pytest.fixture
def sample_csv() -> str:
    return "\n".join(
        [
            HEADER,
            "2026-02-01 18:10:00-05:00,100,105,95,102,1000",
            "2026-02-01 18:15:00-05:00,102,103,99,100,800",
            "2026-02-01 18:20:00-05:00,100,101,98,100,abc",
        ]
    )


@pytest.fixture
def csv_file(tmp_path: Path, sample_csv: str) -> Path:
    path = tmp_path / "data.csv"
    path.write_text(sample_csv + "\n", encoding="utf-8")
    return path
