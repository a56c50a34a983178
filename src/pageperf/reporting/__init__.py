"""Reporting sinks for captured metrics samples."""

from pageperf.reporting.sinks import (
    FanOutSink,
    InMemorySink,
    JsonLinesSink,
    MetricsSink,
    emit_sample,
    write_run_report,
)

__all__ = [
    "FanOutSink",
    "InMemorySink",
    "JsonLinesSink",
    "MetricsSink",
    "emit_sample",
    "write_run_report",
]
