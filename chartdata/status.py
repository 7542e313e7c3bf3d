from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

__all__ = ["LoadStatus", "error_status", "loading_status", "success_status"]


@dataclass(frozen=True)
class LoadStatus:
    """Message shown in the page's status line after a load."""

    message: str
    is_error: bool = False

    @property
    def css_class(self) -> str:
        return "error" if self.is_error else "success"

    def to_payload(self) -> Dict[str, str]:
        return {"message": self.message, "class": self.css_class}


def loading_status() -> LoadStatus:
    return LoadStatus("Loading data...")


def success_status(count: int) -> LoadStatus:
    return LoadStatus(f"Successfully loaded {count} data points")


def error_status(exc: BaseException) -> LoadStatus:
    return LoadStatus(f"Error: {exc}", is_error=True)
