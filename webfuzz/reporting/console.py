"""
webfuzz/reporting/console.py

Purpose:
    Human-readable run summary. One block per check; failures show the
    shrunk counterexample and the command that replays them.
"""

from __future__ import annotations

import json
import sys
from typing import List, Optional, TextIO

from webfuzz.contracts.enums import CheckStatus
from webfuzz.contracts.models import CheckResult, Report


def format_duration(ms: float) -> str:
    if ms < 1000:
        return f"{ms:.0f}ms"
    return f"{ms / 1000:.1f}s"


def format_result(result: CheckResult, seed: int) -> str:
    if result.status == CheckStatus.SKIP:
        return f"- {result.name} (skipped: {result.error_message})"

    header = f"{result.name} ({result.trials_run} runs, {format_duration(result.duration)})"
    mark = "✓" if result.passed else "✗"
    lines: List[str] = [f"{mark} {header}"]
    # The property the check asserts, as declared on the Check
    if result.description:
        lines.append(f"  → {result.description}")
    if result.passed:
        return "\n".join(lines)

    if result.aborted:
        lines.append("  Aborted: the browser session became unusable")
    if result.has_counterexample:
        lines.append("  Counterexample:")
        rendered = json.dumps(result.counterexample, indent=2, ensure_ascii=False, default=str)
        lines.extend(f"    {line}" for line in rendered.splitlines())
    if result.shrink_attempts:
        lines.append(f"  Shrink attempts: {result.shrink_attempts}")
    if result.error_message:
        lines.append(f"  Details: {result.error_message}")
    lines.append(f"  Replay: webfuzz --check {result.name} --seed {seed}")
    return "\n".join(lines)


def render(report: Report) -> str:
    blocks = [
        f"webfuzz v{report.version}",
        f"Target: {report.target_base_url}",
        f"Seed: {report.seed}",
        "",
    ]
    for result in report.results:
        blocks.append(format_result(result, report.seed))
        blocks.append("")

    summary = report.summary
    line = f"Results: {summary.passed}/{summary.total - summary.skipped} passed"
    if summary.skipped:
        line += f" ({summary.skipped} skipped)"
    blocks.append(line)
    return "\n".join(blocks) + "\n"


def console_reporter(report: Report, stream: Optional[TextIO] = None) -> None:
    out = stream or sys.stdout
    out.write(render(report))
    out.flush()
