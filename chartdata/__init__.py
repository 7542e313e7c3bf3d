"""CSV price loading helpers for the candlestick chart app."""
