import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import uvicorn
from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.responses import HTMLResponse, PlainTextResponse

from chartdata.chart import (
    CHART_HEIGHT,
    candlestick_series_options,
    chart_options,
    format_chart_payload,
    price_scale_options,
    volume_series_options,
)
from chartdata.rows import NoValidDataError, parse_csv_frame, parse_csv_text, require_candles
from chartdata.source import AcquisitionError, decode_upload, read_csv_source
from chartdata.status import error_status, loading_status, success_status


DATA_FILE = Path(__file__).with_name("data.csv")
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000


def load_resource_payload(source: Any) -> Dict[str, Any]:
    """Fetch pipeline: read the configured CSV and build price + volume series."""
    text = read_csv_source(source)
    candles = require_candles(parse_csv_text(text))
    payload = format_chart_payload(candles, include_volume=True)
    payload["status"] = success_status(len(candles)).to_payload()
    return payload


def load_upload_payload(raw: bytes) -> Dict[str, Any]:
    """Upload pipeline: pandas-tokenized CSV, volume only when the file has it."""
    parsed = parse_csv_frame(decode_upload(raw))
    candles = require_candles(parsed.candles)
    payload = format_chart_payload(candles, include_volume=parsed.has_volume)
    payload["status"] = success_status(len(candles)).to_payload()
    return payload


def _load_error(exc: ValueError, acquisition_code: int = 502) -> HTTPException:
    status = error_status(exc)
    logging.error("Load failed: %s", exc)
    if isinstance(exc, NoValidDataError):
        code = 422
    elif isinstance(exc, AcquisitionError):
        code = acquisition_code
    else:
        code = 400
    return HTTPException(status_code=code, detail=status.message)


app = FastAPI(title="CSV Candlestick Chart")
app.state.data_source = DATA_FILE


@app.get("/api/candles")
def read_candles() -> Dict[str, Any]:
    try:
        payload = load_resource_payload(app.state.data_source)
    except ValueError as exc:
        raise _load_error(exc) from exc
    logging.info("Loaded %d candles from %s", payload["count"], app.state.data_source)
    return payload


@app.post("/api/upload")
async def upload_csv(file: UploadFile = File(...)) -> Dict[str, Any]:
    raw = await file.read()
    try:
        payload = load_upload_payload(raw)
    except ValueError as exc:
        raise _load_error(exc, acquisition_code=400) from exc
    logging.info("Loaded %d candles from upload %s", payload["count"], file.filename)
    return payload


@app.get("/data.csv", response_class=PlainTextResponse)
def read_data_file() -> PlainTextResponse:
    try:
        text = read_csv_source(app.state.data_source)
    except AcquisitionError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return PlainTextResponse(text, media_type="text/csv")


@app.get("/", response_class=HTMLResponse)
def index() -> str:
    """Serve the single-page chart UI."""
    template = """
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1.0" />
    <title>Stock Price Chart</title>
    <link rel="preconnect" href="https://unpkg.com" />
    <style>
        body {
            margin: 0;
            padding: 1.25rem 1.75rem;
            font-family: "Inter", system-ui, -apple-system, BlinkMacSystemFont, sans-serif;
            background-color: #f5f6f8;
            color: #1f2430;
        }
        header {
            display: flex;
            align-items: center;
            justify-content: space-between;
            flex-wrap: wrap;
            gap: 0.85rem;
            margin-bottom: 1rem;
        }
        header h1 {
            font-size: 1.1rem;
            font-weight: 600;
            margin: 0;
        }
        .upload label {
            font-size: 0.75rem;
            color: #5d6780;
            text-transform: uppercase;
            letter-spacing: 0.08em;
            margin-right: 0.5rem;
        }
        #chart-container {
            width: 100%;
            height: %(height)spx;
            background: #ffffff;
            border: 1px solid #d9dde6;
            border-radius: 8px;
            overflow: hidden;
        }
        #status-message {
            margin-top: 0.75rem;
            font-family: "JetBrains Mono", "Roboto Mono", monospace;
            font-size: 0.85rem;
        }
        #status-message.success {
            color: #1b7f74;
        }
        #status-message.error {
            color: #c62828;
        }
        #status-range {
            margin-left: 0.75rem;
            color: #7a8399;
        }
    </style>
    <script src="https://unpkg.com/lightweight-charts@4.1.1/dist/lightweight-charts.standalone.production.js"></script>
</head>
<body>
    <header>
        <h1>Stock Price Chart</h1>
        <div class="upload">
            <label for="csvInput">CSV</label>
            <input type="file" id="csvInput" accept=".csv,text/csv" />
        </div>
    </header>
    <div id="chart-container"></div>
    <div>
        <span id="status-message">%(loading)s</span>
        <span id="status-range"></span>
    </div>
    <script>
        const CHART_OPTIONS = %(chart_options)s;
        const CANDLE_OPTIONS = %(candle_options)s;
        const VOLUME_OPTIONS = %(volume_options)s;
        const PRICE_SCALE_OPTIONS = %(price_scale)s;
        const LOADING_MESSAGE = %(loading_json)s;

        const chartContainer = document.getElementById("chart-container");
        const statusElement = document.getElementById("status-message");
        const statusRange = document.getElementById("status-range");
        const csvInput = document.getElementById("csvInput");

        let chart = null;
        let candleSeries = null;
        let volumeSeries = null;

        const updateStatus = (message, isError = false) => {
            statusElement.textContent = message;
            statusElement.className = isError ? "error" : "success";
        };

        const showError = (message) => {
            const text = message || "Failed to load chart data";
            updateStatus(text.startsWith("Error:") ? text : `Error: ${text}`, true);
            statusRange.textContent = "";
        };

        const ensureChart = () => {
            if (chart) return;
            chart = LightweightCharts.createChart(chartContainer, {
                ...CHART_OPTIONS,
                width: chartContainer.clientWidth,
            });
            candleSeries = chart.addCandlestickSeries(CANDLE_OPTIONS);
            volumeSeries = chart.addHistogramSeries(VOLUME_OPTIONS);
            chart.priceScale("right").applyOptions(PRICE_SCALE_OPTIONS);
            window.addEventListener("resize", () => {
                chart.applyOptions({ width: chartContainer.clientWidth });
            });
        };

        const readErrorMessage = async (response) => {
            let message = `HTTP error! status: ${response.status}`;
            try {
                const payload = await response.json();
                if (payload?.detail) message = payload.detail;
            } catch (_) {
                // non-JSON error body
            }
            return message;
        };

        const renderPayload = (data) => {
            ensureChart();
            candleSeries.setData(data.candles);
            volumeSeries.setData(data.volumes || []);
            chart.timeScale().fitContent();
            updateStatus(data.status.message, data.status.class === "error");
            statusRange.textContent = data.range
                ? `${data.range.start} ~ ${data.range.end}`
                : "";
        };

        const runLoad = async (request) => {
            try {
                updateStatus(LOADING_MESSAGE);
                const response = await request();
                if (!response.ok) {
                    throw new Error(await readErrorMessage(response));
                }
                renderPayload(await response.json());
            } catch (error) {
                console.error("Error:", error);
                showError(error.message);
            }
        };

        const loadAndVisualizeData = () => runLoad(() => fetch("/api/candles"));

        csvInput.addEventListener("change", (event) => {
            const file = event.target.files[0];
            if (!file) return;
            const body = new FormData();
            body.append("file", file);
            runLoad(() => fetch("/api/upload", { method: "POST", body }));
        });

        document.addEventListener("DOMContentLoaded", loadAndVisualizeData);
    </script>
</body>
</html>
        """
    return (
        template.replace("%(height)s", str(CHART_HEIGHT))
        .replace("%(loading)s", loading_status().message)
        .replace("%(loading_json)s", json.dumps(loading_status().message))
        .replace("%(chart_options)s", json.dumps(chart_options()))
        .replace("%(candle_options)s", json.dumps(candlestick_series_options()))
        .replace("%(volume_options)s", json.dumps(volume_series_options()))
        .replace("%(price_scale)s", json.dumps(price_scale_options()))
    )


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve a candlestick chart for a CSV file.")
    parser.add_argument(
        "--data",
        default=str(DATA_FILE),
        help="CSV path or http(s) URL loaded on page open (default: ./data.csv)",
    )
    parser.add_argument("--host", default=DEFAULT_HOST, help=f"Bind address (default: {DEFAULT_HOST})")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help=f"Port (default: {DEFAULT_PORT})")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    app.state.data_source = args.data
    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
