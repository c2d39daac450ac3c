"""Module aggregator: folds per-check results into the run report."""

from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone
from typing import Iterable, Optional

from webfuzz import __version__
from webfuzz.contracts.enums import CheckStatus
from webfuzz.contracts.models import CheckResult, Report, Summary


def summarize(results: Iterable[CheckResult]) -> Summary:
    results = list(results)
    counts = Counter(result.status for result in results)
    return Summary(
        total=len(results),
        passed=counts[CheckStatus.PASS],
        failed=counts[CheckStatus.FAIL],
        skipped=counts[CheckStatus.SKIP],
    )


def build_report(
    results: Iterable[CheckResult],
    seed: int,
    base_url: str,
    timestamp: Optional[datetime] = None,
) -> Report:
    """Results keep their execution order; one seed and one timestamp per run."""
    ordered = list(results)
    return Report(
        version=__version__,
        seed=seed,
        timestamp=timestamp or datetime.now(timezone.utc),
        target_base_url=base_url,
        results=ordered,
        summary=summarize(ordered),
    )
