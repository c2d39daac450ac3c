"""
webfuzz/reporting/html_reporter.py

Purpose:
    Standalone HTML page for sharing a run: summary cards, one block per
    check, and for failures the counterexample plus the replay command.
    Without a stream the page is written to webfuzz-report.html.
"""

from __future__ import annotations

import html
import json
import logging
from pathlib import Path
from typing import List, Optional, TextIO

from webfuzz.contracts.enums import CheckStatus
from webfuzz.contracts.models import CheckResult, Report

from .console import format_duration

log = logging.getLogger("reporting.html")

DEFAULT_HTML_REPORT = "webfuzz-report.html"

STATUS_ICONS = {
    CheckStatus.PASS: "&#10003;",
    CheckStatus.FAIL: "&#10007;",
    CheckStatus.SKIP: "&#8212;",
}

STYLE = """
    :root {
      --pass: #22c55e; --fail: #ef4444; --skip: #a1a1aa;
      --bg: #fafafa; --card: #ffffff; --border: #e5e5e5;
      --text: #171717; --muted: #737373;
    }
    * { box-sizing: border-box; margin: 0; padding: 0; }
    body {
      font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
      background: var(--bg); color: var(--text); line-height: 1.6; padding: 2rem;
    }
    .container { max-width: 900px; margin: 0 auto; }
    header {
      display: flex; justify-content: space-between; align-items: center;
      margin-bottom: 2rem; padding-bottom: 1rem; border-bottom: 1px solid var(--border);
    }
    h1 { font-size: 1.5rem; font-weight: 600; }
    .meta-info, .meta, footer { color: var(--muted); font-size: 0.875rem; }
    .summary { display: grid; grid-template-columns: repeat(4, 1fr); gap: 1rem; margin-bottom: 2rem; }
    .summary-card, .result {
      background: var(--card); border: 1px solid var(--border); border-radius: 8px; padding: 1rem;
    }
    .summary-card { text-align: center; }
    .summary-card .value { font-size: 2rem; font-weight: 700; }
    .summary-card.pass .value, .status-pass .status-icon { color: var(--pass); }
    .summary-card.fail .value, .status-fail .status-icon, .error { color: var(--fail); }
    .summary-card.skip .value, .status-skip .status-icon, .skip-reason { color: var(--skip); }
    .results { display: flex; flex-direction: column; gap: 1rem; }
    .result { border-left: 4px solid var(--border); }
    .result.status-pass { border-left-color: var(--pass); }
    .result.status-fail { border-left-color: var(--fail); }
    .result.status-skip { border-left-color: var(--skip); }
    .result-header { display: flex; align-items: center; gap: 0.75rem; }
    .status-icon { font-size: 1.25rem; width: 1.5rem; text-align: center; }
    .check-name { font-weight: 600; }
    .meta { margin-left: auto; }
    .description, .counterexample, .error, .replay, .skip-reason {
      margin-top: 0.75rem; padding-top: 0.75rem; border-top: 1px solid var(--border); font-size: 0.875rem;
    }
    pre, code { background: var(--bg); border-radius: 4px; font-family: 'SF Mono', Consolas, monospace; }
    pre { padding: 0.75rem; overflow-x: auto; margin-top: 0.5rem; }
    code { padding: 0.25rem 0.5rem; }
    footer { margin-top: 2rem; padding-top: 1rem; border-top: 1px solid var(--border); text-align: center; }
"""


def pass_rate(report: Report) -> int:
    """Percentage of executed (non-skipped) checks that passed."""
    executed = report.summary.total - report.summary.skipped
    if executed == 0:
        return 0
    return round(report.summary.passed * 100 / executed)


def render_result(result: CheckResult, seed: int) -> str:
    status = result.status.value
    parts: List[str] = [
        f'<div class="result status-{status}">',
        '  <div class="result-header">',
        f'    <span class="status-icon">{STATUS_ICONS[result.status]}</span>',
        f'    <span class="check-name">{html.escape(result.name)}</span>',
        f'    <span class="meta">{result.trials_run} runs, {format_duration(result.duration)}</span>',
        "  </div>",
    ]

    if result.status == CheckStatus.SKIP:
        reason = html.escape(result.error_message or "")
        parts.append(f'  <div class="skip-reason"><em>Skipped: {reason}</em></div>')
        parts.append("</div>")
        return "\n".join(parts)

    if result.description:
        parts.append(f'  <div class="description">{html.escape(result.description)}</div>')
    if result.status == CheckStatus.FAIL:
        if result.has_counterexample:
            rendered = json.dumps(result.counterexample, indent=2, ensure_ascii=False, default=str)
            parts.append(
                '  <div class="counterexample"><strong>Counterexample:</strong>'
                f"<pre>{html.escape(rendered)}</pre></div>"
            )
        if result.error_message:
            parts.append(f'  <div class="error"><strong>Error:</strong> {html.escape(result.error_message)}</div>')
        replay = html.escape(f"webfuzz --check {result.name} --seed {seed}")
        parts.append(f'  <div class="replay"><strong>Replay:</strong> <code>{replay}</code></div>')
    parts.append("</div>")
    return "\n".join(parts)


def render_html(report: Report) -> str:
    summary = report.summary
    cards = [
        ("", f"{pass_rate(report)}%", "Pass Rate"),
        (" pass", summary.passed, "Passed"),
        (" fail", summary.failed, "Failed"),
        (" skip", summary.skipped, "Skipped"),
    ]
    card_html = "\n".join(
        f'      <div class="summary-card{css}"><div class="value">{value}</div><div class="label">{label}</div></div>'
        for css, value, label in cards
    )
    results_html = "\n".join(render_result(result, report.seed) for result in report.results)

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>webfuzz Report</title>
  <style>{STYLE}  </style>
</head>
<body>
  <div class="container">
    <header>
      <h1>webfuzz Report</h1>
      <div class="meta-info">
        <div>Target: {html.escape(report.target_base_url)}</div>
        <div>Seed: {report.seed}</div>
        <div>{report.timestamp.isoformat()}</div>
      </div>
    </header>
    <div class="summary">
{card_html}
    </div>
    <div class="results">
{results_html}
    </div>
    <footer>Generated by webfuzz v{html.escape(report.version)}</footer>
  </div>
</body>
</html>
"""


def html_reporter(report: Report, stream: Optional[TextIO] = None) -> None:
    document = render_html(report)
    if stream is not None:
        stream.write(document)
        stream.flush()
        return

    path = Path(DEFAULT_HTML_REPORT)
    path.write_text(document, encoding="utf-8")
    log.info(f"HTML report written to {path.resolve()}")
    print(f"HTML report saved to: {path}")
