"""
webfuzz/executor/runner.py

Purpose:
    The property runner. Executes one Check for N seeded trials against the
    session driver, and on the first failure walks the sample's shrink tree
    to a minimal counterexample.

Algorithm:
    1. Precondition -> skip (no samples drawn, trialsRun = 0).
    2. Trial i draws from random.Random(derive_seed(seed, check, i)).
       The session's signal buffers are reset before the predicate and read
       right after it, so a page error belongs to exactly one trial.
    3. First failure stops new trials. Shrink search iterates the current
       node's candidates, skipping any larger than the current
       counterexample; the first candidate that still fails is adopted and
       the search restarts from it. It stops when a full pass finds no
       failing candidate or max_shrink_attempts predicate calls are spent.

Propagation:
    ConfigurationError (GeneratorExhaustedError included) and DriverFatalError
    leave the runner untouched. Everything else a predicate raises is a
    trial failure.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Tuple

from webfuzz.arbitraries import Shrinkable, measure, trial_rng
from webfuzz.base.config import FuzzConfig
from webfuzz.base.exceptions import ConfigurationError, DriverFatalError
from webfuzz.checks.base import Check, CheckSession, Outcome
from webfuzz.contracts.enums import CheckStatus
from webfuzz.contracts.models import CheckResult
from webfuzz.driver.base import SessionDriver
from webfuzz.errors import WebFuzzError

log = logging.getLogger("executor.runner")

DEFAULT_NUM_RUNS = 50
DEFAULT_MAX_SHRINK_ATTEMPTS = 500


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000.0


class PropertyRunner:
    def __init__(self, num_runs: int = DEFAULT_NUM_RUNS, max_shrink_attempts: int = DEFAULT_MAX_SHRINK_ATTEMPTS):
        if num_runs < 1:
            raise ConfigurationError("numRuns must be at least 1")
        if max_shrink_attempts < 0:
            raise ConfigurationError("maxShrinkAttempts must be non-negative")
        self.num_runs = num_runs
        self.max_shrink_attempts = max_shrink_attempts

    async def run(self, check: Check, driver: SessionDriver, config: FuzzConfig, seed: int) -> CheckResult:
        start = time.perf_counter()

        reason = check.skip_reason(config)
        if reason:
            log.info(f"[{check.name}] skipped: {reason}")
            return CheckResult(
                name=check.name, status=CheckStatus.SKIP, description=check.description, error_message=reason
            )

        arbitrary = check.arbitrary_for(config)

        async with CheckSession(driver, config) as session:
            for index in range(self.num_runs):
                node = arbitrary.draw(trial_rng(seed, check.name, index))
                outcome = await self._evaluate(check, node.value, session, config)
                if outcome.passed:
                    continue

                log.info(f"[{check.name}] trial {index} failed: {outcome.message}; shrinking")
                node, outcome, attempts = await self._shrink(check, node, outcome, session, config)
                log.info(f"[{check.name}] shrunk after {attempts} attempt(s) to {node.value!r:.200}")
                return CheckResult(
                    name=check.name,
                    description=check.description,
                    status=CheckStatus.FAIL,
                    trials_run=index + 1,
                    shrink_attempts=attempts,
                    duration=_elapsed_ms(start),
                    has_counterexample=True,
                    counterexample=node.value,
                    error_message=outcome.message,
                )

        return CheckResult(
            name=check.name,
            description=check.description,
            status=CheckStatus.PASS,
            trials_run=self.num_runs,
            duration=_elapsed_ms(start),
        )

    async def _evaluate(self, check: Check, sample: Any, session: CheckSession, config: FuzzConfig) -> Outcome:
        """Run the predicate once inside a fresh trial window."""
        session.begin_trial()
        try:
            outcome = Outcome.coerce(await check.predicate(sample, session, config))
        except (DriverFatalError, ConfigurationError):
            raise
        except WebFuzzError as e:
            outcome = Outcome.failure(e.message)
        except Exception as e:
            outcome = Outcome.failure(f"{type(e).__name__}: {e}")
        signals = session.end_trial()

        if not outcome.passed:
            return outcome
        if signals.page_errors:
            return Outcome.failure(f"JavaScript error: {signals.page_errors[0]}")
        if check.fail_on_dialog and signals.dialogs:
            return Outcome.failure(f"Unexpected dialog: {signals.dialogs[0]}")
        return outcome

    async def _shrink(
        self,
        check: Check,
        node: Shrinkable[Any],
        outcome: Outcome,
        session: CheckSession,
        config: FuzzConfig,
    ) -> Tuple[Shrinkable[Any], Outcome, int]:
        attempts = 0
        size = measure(node.value)
        improved = True

        while improved and attempts < self.max_shrink_attempts:
            improved = False
            for candidate in node.shrink():
                if attempts >= self.max_shrink_attempts:
                    break
                candidate_size = measure(candidate.value)
                if candidate_size > size:
                    continue
                attempts += 1
                verdict = await self._evaluate(check, candidate.value, session, config)
                if not verdict.passed:
                    log.debug(f"[{check.name}] smaller failure (size {candidate_size}): {candidate.value!r:.120}")
                    node, outcome, size = candidate, verdict, candidate_size
                    improved = True
                    break

        return node, outcome, attempts
