"""Telemetry module for logging, the profit ledger, metrics and status output."""

from roundtrip.telemetry.ledger import ProfitLedger
from roundtrip.telemetry.logger import AsyncLogger, setup_logging
from roundtrip.telemetry.metrics import MetricsCollector, RoundTripStats
from roundtrip.telemetry.reporter import StatusReporter


__all__ = [
    "AsyncLogger",
    "MetricsCollector",
    "ProfitLedger",
    "RoundTripStats",
    "StatusReporter",
    "setup_logging",
]
