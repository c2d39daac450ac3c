"""
Built-in checks driven against the scripted driver.
"""

import random

import pytest

from webfuzz.base.config import (
    ButtonTarget,
    CheckOptions,
    FormTarget,
    FuzzConfig,
    QueryParamOptions,
    RapidClickOptions,
)
from webfuzz.base.exceptions import ElementNotInteractableError, NavigationError
from webfuzz.checks import (
    FORM_FUZZING,
    HISTORY_NAVIGATION,
    NO_SERVER_ERROR,
    QUERY_PARAM_FUZZING,
    RAPID_CLICK,
    RELOAD_STATE_RESTORE,
    CheckSession,
)
from webfuzz.checks.inputs import build_query_url
from webfuzz.checks.interaction import click_targets
from webfuzz.driver.base import FormField


@pytest.fixture
def form_config(config):
    return config.with_overrides(
        forms=(FormTarget(path="/signup", selector="#signup", submit="#go"),),
        buttons=(ButtonTarget(path="/cart", selector="#buy"),),
    )


async def _run(check, sample, driver, config):
    async with CheckSession(driver, config) as session:
        return await check.predicate(sample, session, config)


# ============================================================================
# noServerError
# ============================================================================

@pytest.mark.asyncio
async def test_no_server_error_flags_5xx(make_driver, config):
    driver = make_driver(statuses={"/boom": 503})

    outcome = await _run(NO_SERVER_ERROR, "/boom", driver, config)

    assert not outcome.passed
    assert outcome.message == "Server error 503 at http://app.test/boom"


@pytest.mark.asyncio
async def test_no_server_error_accepts_4xx(make_driver, config):
    driver = make_driver(statuses={"/missing": 404})
    assert await _run(NO_SERVER_ERROR, "/missing", driver, config) is None


# ============================================================================
# formFuzzing
# ============================================================================

def test_form_fuzzing_skips_without_forms(config):
    assert FORM_FUZZING.skip_reason(config) == "No forms configured"


def test_form_inputs_index_configured_forms(form_config):
    arb = FORM_FUZZING.arbitrary_for(form_config)
    rng = random.Random(3)
    for _ in range(50):
        sample = arb.draw(rng).value
        assert sample["formIndex"] == 0
        assert isinstance(sample["inputs"], dict)


@pytest.mark.asyncio
async def test_form_fuzzing_fills_named_fields_and_submits(make_driver, form_config):
    driver = make_driver(fields={"#signup": [
        FormField("#signup input >> nth=0", "input", name="email", type="email"),
        FormField("#signup input >> nth=1", "input", name="csrf", type="hidden"),
        FormField("#signup textarea >> nth=0", "textarea"),
    ]})
    sample = {"formIndex": 0, "inputs": {"email": "' OR '1'='1", "bio": "x"}}

    outcome = await _run(FORM_FUZZING, sample, driver, form_config)

    assert outcome.passed
    assert driver.calls[0] == ("navigate", "http://app.test/signup")
    fills = [call for call in driver.calls if call[0] == "fill"]
    assert fills == [
        ("fill", "#signup input >> nth=0", "' OR '1'='1"),
        ("fill", "#signup textarea >> nth=0", "' OR '1'='1"),
    ]
    assert ("click", "#go", False) in driver.calls
    assert ("wait", 500) in driver.calls


@pytest.mark.asyncio
async def test_form_fuzzing_defaults_to_test_value(make_driver, form_config):
    driver = make_driver(fields={"#signup": [FormField("#signup input >> nth=0", "input", name="q")]})

    await _run(FORM_FUZZING, {"formIndex": 0, "inputs": {}}, driver, form_config)

    assert ("fill", "#signup input >> nth=0", "test") in driver.calls


@pytest.mark.asyncio
async def test_form_fuzzing_tolerates_unclickable_submit(make_driver, form_config):
    driver = make_driver(visible=())

    async def refuse(selector):
        raise ElementNotInteractableError(selector, "disabled")

    driver.on_click = refuse
    outcome = await _run(FORM_FUZZING, {"formIndex": 0, "inputs": {}}, driver, form_config)

    assert not outcome.passed
    assert outcome.message == "Page body is not visible after form submission"


# ============================================================================
# queryParamFuzzing
# ============================================================================

def test_build_query_url(config):
    assert build_query_url(config, "/search", {}) == "http://app.test/search"
    assert build_query_url(config, "/search", {"q": "a b"}) == "http://app.test/search?q=a+b"
    assert build_query_url(config, "/s?x=1", {"q": "1"}) == "http://app.test/s?x=1&q=1"


def test_query_params_draw_from_configured_names(config):
    tuned = config.with_overrides(
        check_options=CheckOptions(query_param_fuzzing=QueryParamOptions(params=("page",)))
    )
    arb = QUERY_PARAM_FUZZING.arbitrary_for(tuned)
    rng = random.Random(1)
    for _ in range(100):
        assert set(arb.draw(rng).value.get("params", {})) <= {"page"}


@pytest.mark.asyncio
async def test_query_param_fuzzing_reports_5xx_url(make_driver, config):
    driver = make_driver(statuses={"/search": 500})

    outcome = await _run(QUERY_PARAM_FUZZING, {"path": "/search", "params": {"q": "1"}}, driver, config)

    assert outcome.message == "Server error 500 at http://app.test/search?q=1"


@pytest.mark.asyncio
async def test_query_param_fuzzing_passes_and_settles(fake_driver, config):
    outcome = await _run(QUERY_PARAM_FUZZING, {"path": "/", "params": {}}, fake_driver, config)

    assert outcome.passed
    assert ("wait", 200) in fake_driver.calls


# ============================================================================
# historyNavigation
# ============================================================================

@pytest.mark.asyncio
async def test_history_navigation_tolerates_failed_steps(make_driver, config):
    driver = make_driver()

    async def unreachable(url):
        if url.endswith("/gone"):
            raise NavigationError(url, "net::ERR_CONNECTION_REFUSED")

    driver.on_navigate = unreachable
    actions = [{"type": "back"}, {"type": "navigate", "path": "/gone"}, {"type": "forward"}]

    outcome = await _run(HISTORY_NAVIGATION, actions, driver, config)

    assert outcome.passed
    assert [call[0] for call in driver.calls] == [
        "navigate", "go_back", "navigate", "go_forward", "query_visible",
    ]


@pytest.mark.asyncio
async def test_history_navigation_fails_on_blank_page(make_driver, config):
    driver = make_driver(visible=())
    outcome = await _run(HISTORY_NAVIGATION, [{"type": "back"}], driver, config)
    assert outcome.message == "Page body is not visible after history navigation"


def test_history_actions_are_bounded(config):
    arb = HISTORY_NAVIGATION.arbitrary_for(config)
    rng = random.Random(2)
    for _ in range(100):
        actions = arb.draw(rng).value
        assert 1 <= len(actions) <= 15
        assert {action["type"] for action in actions} <= {"back", "forward", "navigate"}


# ============================================================================
# rapidClick
# ============================================================================

def test_click_targets_use_override_selector(form_config):
    tuned = form_config.with_overrides(
        check_options=CheckOptions(rapid_click=RapidClickOptions(max_clicks=4, target_selector="button.pay"))
    )
    assert [(t.path, t.selector) for t in click_targets(tuned)] == [("/signup", "button.pay"), ("/cart", "#buy")]


def test_rapid_click_skips_without_targets(config):
    assert RAPID_CLICK.skip_reason(config) == "No forms or buttons configured"


def test_click_bursts_stay_in_bounds(form_config):
    arb = RAPID_CLICK.arbitrary_for(form_config)
    rng = random.Random(4)
    for _ in range(200):
        sample = arb.draw(rng).value
        assert sample["targetIndex"] in (0, 1)
        assert 2 <= sample["clicks"] <= 10


@pytest.mark.asyncio
async def test_rapid_click_fires_every_click_before_checking(make_driver, form_config):
    driver = make_driver(visible=("body", "#buy"))
    refused = []

    async def flaky(selector):
        refused.append(selector)
        if len(refused) % 2 == 0:
            raise ElementNotInteractableError(selector, "detached")

    driver.on_click = flaky

    outcome = await _run(RAPID_CLICK, {"targetIndex": 1, "clicks": 5}, driver, form_config)

    assert outcome.passed
    assert driver.count("click") == 5
    assert all(call == ("click", "#buy", True) for call in driver.calls if call[0] == "click")
    last_click = max(i for i, call in enumerate(driver.calls) if call[0] == "click")
    assert driver.calls.index(("query_visible", "body")) > last_click
    assert ("wait", 500) in driver.calls


@pytest.mark.asyncio
async def test_rapid_click_invisible_target_is_a_pass(make_driver, form_config):
    driver = make_driver(visible=("body",))

    outcome = await _run(RAPID_CLICK, {"targetIndex": 1, "clicks": 3}, driver, form_config)

    assert outcome.passed
    assert driver.count("click") == 0


# ============================================================================
# reloadStateRestore
# ============================================================================

@pytest.mark.asyncio
async def test_reload_keeps_url(fake_driver, config):
    outcome = await _run(RELOAD_STATE_RESTORE, "/profile", fake_driver, config)
    assert outcome.passed
    assert fake_driver.count("reload") == 1


@pytest.mark.asyncio
async def test_reload_redirect_is_reported(make_driver, config):
    driver = make_driver()
    driver.reload_url = "http://app.test/login"

    outcome = await _run(RELOAD_STATE_RESTORE, "/profile", driver, config)

    assert outcome.message == "URL changed after reload: http://app.test/profile -> http://app.test/login"


def test_default_config_validates():
    assert FuzzConfig().validate() == []
