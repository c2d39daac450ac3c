"""Module json_reporter: the machine-readable report for CI pipelines."""

from __future__ import annotations

import json
import sys
from typing import Optional, TextIO

from webfuzz.contracts.models import Report


def json_reporter(report: Report, stream: Optional[TextIO] = None) -> None:
    out = stream or sys.stdout
    # Field names are camelCase and stable (name, status, trialsRun, ...)
    json.dump(report.to_document(), out, indent=2, ensure_ascii=False)
    out.write("\n")
    out.flush()
