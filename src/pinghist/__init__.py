"""Ping latency history: record samples, query bucketed summaries."""

__version__ = "0.1.0"
