"""
Utility helpers used by the migration commands.

This subpackage exposes structured logging of per-item outcomes, the
exception hierarchy, taxonomy label helpers, the DuckDB migration ledger
and the pre-flight checks run before a command writes anything.
"""

from .errors import ERRORS, report_error, report_ok

__all__ = ["ERRORS", "report_error", "report_ok"]
