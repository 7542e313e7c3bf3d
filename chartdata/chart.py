"""lightweight-charts configuration and series payloads.

Everything here is plain JSON-able data; the page feeds it straight into
``LightweightCharts.createChart`` / ``addCandlestickSeries`` /
``addHistogramSeries``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from chartdata.records import Candle

UP_COLOR = "#26a69a"
DOWN_COLOR = "#ef5350"
GRID_COLOR = "rgba(197, 203, 206, 0.5)"
CHART_HEIGHT = 500

__all__ = [
    "CHART_HEIGHT",
    "DOWN_COLOR",
    "UP_COLOR",
    "build_volume_points",
    "candlestick_series_options",
    "chart_options",
    "format_chart_payload",
    "price_scale_options",
    "volume_color",
    "volume_series_options",
]


def chart_options(height: int = CHART_HEIGHT) -> Dict[str, Any]:
    # width is measured from the container in the browser
    return {
        "layout": {
            "background": {"type": "solid", "color": "white"},
            "textColor": "black",
        },
        "grid": {
            "vertLines": {"color": GRID_COLOR},
            "horzLines": {"color": GRID_COLOR},
        },
        "timeScale": {"timeVisible": True, "secondsVisible": False},
        "height": height,
    }


def candlestick_series_options() -> Dict[str, Any]:
    return {
        "upColor": UP_COLOR,
        "downColor": DOWN_COLOR,
        "borderVisible": False,
        "wickUpColor": UP_COLOR,
        "wickDownColor": DOWN_COLOR,
    }


def volume_series_options() -> Dict[str, Any]:
    return {
        "color": UP_COLOR,
        "priceFormat": {"type": "volume"},
        "priceScaleId": "",
        "scaleMargins": {"top": 0.8, "bottom": 0},
    }


def price_scale_options() -> Dict[str, Any]:
    return {"scaleMargins": {"top": 0.1, "bottom": 0.2}}


def volume_color(candle: Candle) -> str:
    return UP_COLOR if candle.is_up else DOWN_COLOR


def build_volume_points(candles: Sequence[Candle]) -> List[Dict[str, Any]]:
    return [
        {"time": candle.time, "value": candle.volume, "color": volume_color(candle)}
        for candle in candles
    ]


def _time_range(candles: Sequence[Candle]) -> Optional[Dict[str, str]]:
    if not candles:
        return None
    return {"start": candles[0].iso_time, "end": candles[-1].iso_time}


def format_chart_payload(
    candles: Sequence[Candle], include_volume: bool = True
) -> Dict[str, Any]:
    """Build the JSON body the page hands to the candlestick/volume series.

    Args:
        candles: Normalized records in input order.
        include_volume: Whether to derive the histogram volume series.

    Returns:
        Dict with ``candles``, ``volumes`` (empty when disabled), ``count``
        and the first/last timestamps under ``range``.
    """
    return {
        "candles": [candle.to_payload() for candle in candles],
        "volumes": build_volume_points(candles) if include_volume else [],
        "count": len(candles),
        "range": _time_range(candles),
    }
