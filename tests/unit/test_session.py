"""
Run orchestration: ordering, seeds, abort handling and driver lifecycle.
"""

import pytest

from webfuzz.arbitraries import constant, integers
from webfuzz.base.config import AuthConfig, FuzzConfig
from webfuzz.base.exceptions import RunAbortedError
from webfuzz.checks import Check, CheckRegistry
from webfuzz.contracts.enums import AuthType, CheckStatus
from webfuzz.executor import resolve_seed, run_checks, run_session


async def _passes(sample, session, config):
    return True


async def _navigates(sample, session, config):
    await session.goto("/")


def _check(name, predicate=_passes, **kwargs):
    return Check(name=name, arbitrary=integers(0, 3), predicate=predicate, **kwargs)


def test_resolve_seed_prefers_explicit_then_config(config):
    assert resolve_seed(config, 7) == 7
    assert resolve_seed(config) == 42
    fresh = resolve_seed(FuzzConfig(base_url="http://app.test"))
    assert 0 <= fresh < 2 ** 31


@pytest.mark.asyncio
async def test_results_keep_execution_order(fake_driver, config):
    checks = [_check("b"), _check("a", precondition=lambda cfg: "not today"), _check("c")]

    report = await run_checks(checks, fake_driver, config)

    assert [r.name for r in report.results] == ["b", "a", "c"]
    assert [r.status for r in report.results] == [CheckStatus.PASS, CheckStatus.SKIP, CheckStatus.PASS]
    assert report.seed == 42
    assert report.summary.total == 3
    assert report.summary.skipped == 1
    assert report.succeeded


@pytest.mark.asyncio
async def test_num_runs_override(fake_driver, config):
    report = await run_checks([_check("x")], fake_driver, config, num_runs=3)
    assert report.results[0].trials_run == 3


@pytest.mark.asyncio
async def test_failure_does_not_stop_later_checks(fake_driver, config):
    async def fails(sample, session, config):
        return False

    report = await run_checks([_check("bad", fails), _check("good")], fake_driver, config)

    assert [r.status for r in report.results] == [CheckStatus.FAIL, CheckStatus.PASS]
    assert not report.succeeded


@pytest.mark.asyncio
async def test_driver_failure_aborts_with_partial_report(make_driver, config):
    driver = make_driver()
    calls = []

    async def crash_browser(sample, session, config):
        calls.append(sample)
        driver.closed = True
        await session.goto("/")

    checks = [_check("first"), _check("second", crash_browser), _check("third")]

    with pytest.raises(RunAbortedError) as excinfo:
        await run_checks(checks, driver, config)

    report = excinfo.value.report
    first, second, third = report.results
    assert first.status == CheckStatus.PASS
    assert second.status == CheckStatus.FAIL
    assert second.aborted
    assert second.error_message.startswith("Driver failure:")
    assert third.status == CheckStatus.SKIP
    assert third.error_message == "Run aborted by driver failure"
    assert report.summary.failed == 1
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_run_session_closes_injected_driver(fake_driver, config):
    registry = CheckRegistry(builtins=())
    registry.register(_check("only", _navigates))

    report = await run_session(config, registry=registry, driver=fake_driver, num_runs=2)

    assert [r.name for r in report.results] == ["only"]
    assert fake_driver.closed


@pytest.mark.asyncio
async def test_run_session_closes_driver_after_abort(make_driver, config):
    driver = make_driver()
    registry = CheckRegistry(builtins=())

    async def crash(sample, session, config):
        driver.closed = True
        await session.goto("/")

    registry.register(Check(name="crash", arbitrary=constant(0), predicate=crash))

    with pytest.raises(RunAbortedError):
        await run_session(config, registry=registry, driver=driver)
    assert driver.closed


@pytest.mark.asyncio
async def test_run_session_authenticates_first(fake_driver, config):
    authed = config.with_overrides(auth=AuthConfig(type=AuthType.BEARER, token="t0k"))
    registry = CheckRegistry(builtins=())
    seen = []

    async def records_headers(sample, session, config):
        seen.append(dict(fake_driver.headers))

    registry.register(Check(name="h", arbitrary=constant(0), predicate=records_headers))

    await run_session(authed, registry=registry, driver=fake_driver, num_runs=1)

    assert seen == [{"Authorization": "Bearer t0k"}]


@pytest.mark.asyncio
async def test_run_session_honors_only(fake_driver, config):
    report = await run_session(config, only=["reloadStateRestore"], driver=fake_driver, num_runs=2)
    assert [r.name for r in report.results] == ["reloadStateRestore"]
    assert report.results[0].status == CheckStatus.PASS
