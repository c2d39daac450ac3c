from .enums import AuthType, CheckStatus, DriverType, EventKind, ReporterType, WaitPolicy
from .models import CheckResult, Report, Summary

__all__ = [
    "AuthType",
    "CheckResult",
    "CheckStatus",
    "DriverType",
    "EventKind",
    "Report",
    "ReporterType",
    "Summary",
    "WaitPolicy",
]
