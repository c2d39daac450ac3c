from __future__ import annotations

from typing import Callable, Dict, Optional, TextIO

from webfuzz.contracts.enums import ReporterType
from webfuzz.contracts.models import Report

from .aggregator import build_report, summarize
from .console import console_reporter
from .html_reporter import html_reporter
from .json_reporter import json_reporter

REPORTERS: Dict[ReporterType, Callable[[Report, Optional[TextIO]], None]] = {
    ReporterType.CONSOLE: console_reporter,
    ReporterType.JSON: json_reporter,
    ReporterType.HTML: html_reporter,
}


def emit_report(report: Report, reporter: ReporterType, stream: Optional[TextIO] = None) -> None:
    REPORTERS[reporter](report, stream)


__all__ = [
    "REPORTERS",
    "build_report",
    "console_reporter",
    "emit_report",
    "html_reporter",
    "json_reporter",
    "summarize",
]
