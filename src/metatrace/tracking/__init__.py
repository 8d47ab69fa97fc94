"""Daily logging, protocols and status reports.

Wraps the pure engine with local storage:
- log_daily_metrics: store a day, resolve its target, score it
- update_protocol: set goal weight / body fat
- generate_status_report: dashboard summary
"""

from __future__ import annotations

from metatrace.tracking.diagnostics import StatusReport, generate_status_report
from metatrace.tracking.ledger import (
    log_daily_metrics,
    simulation_defaults,
    update_protocol,
)
from metatrace.tracking.models import LedgerEntry, LogOutcome, Protocol

__all__ = [
    "LedgerEntry",
    "LogOutcome",
    "Protocol",
    "StatusReport",
    "generate_status_report",
    "log_daily_metrics",
    "simulation_defaults",
    "update_protocol",
]
