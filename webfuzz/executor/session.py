"""
webfuzz/executor/session.py

Purpose:
    Run orchestration. Executes resolved checks one after another on a
    single shared driver and folds the results into a Report.

    - One seed per run; when none is configured a fresh one is drawn and
      logged so the run can be replayed.
    - A check's failure never changes how the next check runs.
    - DriverFatalError: the in-flight check is recorded as an aborted
      failure, every check after it as skipped, and RunAbortedError carries
      the partial report to the caller.
"""

from __future__ import annotations

import logging
import time
from typing import List, Optional, Sequence

from webfuzz.arbitraries import fresh_seed
from webfuzz.base.config import FuzzConfig
from webfuzz.base.exceptions import DriverFatalError, RunAbortedError
from webfuzz.checks import Check, CheckRegistry
from webfuzz.contracts.enums import CheckStatus
from webfuzz.contracts.models import CheckResult, Report
from webfuzz.driver import SessionDriver, authenticate, open_driver
from webfuzz.reporting.aggregator import build_report

from .runner import PropertyRunner

log = logging.getLogger("executor.session")

ABORTED_SKIP_REASON = "Run aborted by driver failure"


def resolve_seed(config: FuzzConfig, seed: Optional[int] = None) -> int:
    if seed is not None:
        return seed
    if config.seed is not None:
        return config.seed
    seed = fresh_seed()
    log.info(f"No seed configured; using {seed} (replay with --seed {seed})")
    return seed


async def run_checks(
    checks: Sequence[Check],
    driver: SessionDriver,
    config: FuzzConfig,
    seed: Optional[int] = None,
    num_runs: Optional[int] = None,
) -> Report:
    run_seed = resolve_seed(config, seed)
    runner = PropertyRunner(num_runs or config.num_runs, config.max_shrink_attempts)
    results: List[CheckResult] = []

    for index, check in enumerate(checks):
        log.info(f"Running check: {check.name}...")
        start = time.perf_counter()
        try:
            result = await runner.run(check, driver, config, run_seed)
        except DriverFatalError as e:
            log.error(f"[{check.name}] driver became unusable: {e.message}")
            results.append(
                CheckResult(
                    name=check.name,
                    description=check.description,
                    status=CheckStatus.FAIL,
                    duration=(time.perf_counter() - start) * 1000.0,
                    error_message=f"Driver failure: {e.message}",
                    aborted=True,
                )
            )
            results.extend(
                CheckResult(
                    name=remaining.name,
                    status=CheckStatus.SKIP,
                    description=remaining.description,
                    error_message=ABORTED_SKIP_REASON,
                )
                for remaining in checks[index + 1:]
            )
            raise RunAbortedError(e, build_report(results, run_seed, config.base_url)) from e

        results.append(result)
        log.info(f"[{check.name}] {result.status.value} ({result.trials_run} trials)")

    return build_report(results, run_seed, config.base_url)


async def run_session(
    config: FuzzConfig,
    only: Optional[Sequence[str]] = None,
    seed: Optional[int] = None,
    num_runs: Optional[int] = None,
    registry: Optional[CheckRegistry] = None,
    driver: Optional[SessionDriver] = None,
) -> Report:
    """
    Full run: load plugins, resolve checks, open the driver, authenticate,
    run, and always close the driver. A driver passed in is closed too.
    """
    if registry is None:
        registry = CheckRegistry()
    if config.custom_checks:
        registry.load_plugins(config.custom_checks, config.config_dir)
    checks = registry.resolve(config, only)
    if not checks:
        log.warning("No checks enabled")

    driver = driver or await open_driver(config)
    try:
        if config.auth is not None:
            await authenticate(driver, config.auth, config.base_url)
        return await run_checks(checks, driver, config, seed=seed, num_runs=num_runs)
    finally:
        await driver.close()
