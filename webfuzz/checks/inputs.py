"""
webfuzz/checks/inputs.py

Purpose:
    Checks that push hostile input into the application: form fields and
    query strings. Values come from the adversarial corpus mixed with plain
    and oversized random text.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional
from urllib.parse import urlencode

from webfuzz.arbitraries import (
    Arbitrary,
    dictionaries,
    integers,
    malicious_string,
    one_of,
    query_params_arbitrary,
    record,
    text,
)
from webfuzz.base.config import FuzzConfig
from webfuzz.base.exceptions import DriverError, DriverFatalError

from .base import Check, CheckSession, Outcome
from .navigation import config_paths

log = logging.getLogger("checks.inputs")

SUBMIT_SETTLE_MS = 500
QUERY_SETTLE_MS = 200
DEFAULT_FIELD_VALUE = "test"


# ============================================================================
# formFuzzing
# ============================================================================

def forms_configured(config: FuzzConfig) -> Optional[str]:
    return None if config.forms else "No forms configured"


def form_inputs(config: FuzzConfig) -> Arbitrary[Dict[str, Any]]:
    field_value = one_of(text(), malicious_string(), text(max_size=10000))
    return record({
        "formIndex": integers(0, len(config.forms) - 1),
        "inputs": dictionaries(text(min_size=1, max_size=30), field_value),
    })


async def form_fuzzing(sample: Dict[str, Any], session: CheckSession, config: FuzzConfig) -> Outcome:
    form = config.forms[sample["formIndex"]]
    inputs: Dict[str, str] = sample["inputs"]
    fallback = next(iter(inputs.values()), DEFAULT_FIELD_VALUE)

    await session.goto(form.path)

    for field in await session.list_fields(form.selector):
        if field.skippable:
            continue
        value = (inputs.get(field.name) if field.name else None) or fallback
        try:
            await session.fill(field.selector, value)
        except DriverFatalError:
            raise
        except DriverError as e:
            # disabled/readonly fields
            log.debug(f"skip field {field.selector}: {e.message}")

    try:
        await session.click(form.submit)
    except DriverFatalError:
        raise
    except DriverError as e:
        log.debug(f"submit {form.submit} not clickable: {e.message}")

    await session.wait(SUBMIT_SETTLE_MS)

    if not await session.body_visible():
        return Outcome.failure("Page body is not visible after form submission")
    return Outcome.ok()


FORM_FUZZING = Check(
    name="formFuzzing",
    arbitrary=form_inputs,
    predicate=form_fuzzing,
    precondition=forms_configured,
    description="Submitting hostile values through a configured form never breaks the page.",
)


# ============================================================================
# queryParamFuzzing
# ============================================================================

def path_with_params(config: FuzzConfig) -> Arbitrary[Dict[str, Any]]:
    names = config.check_options.query_param_fuzzing.params
    return record({
        "path": config_paths(config),
        "params": query_params_arbitrary(names or None),
    })


def build_query_url(config: FuzzConfig, path: str, params: Dict[str, str]) -> str:
    url = config.url_for(path)
    if not params:
        return url
    return f"{url}{'&' if '?' in url else '?'}{urlencode(params)}"


async def query_param_fuzzing(sample: Dict[str, Any], session: CheckSession, config: FuzzConfig) -> Outcome:
    url = build_query_url(config, sample["path"], sample["params"])

    status = await session.navigate(url)
    if status is not None and status >= 500:
        return Outcome.failure(f"Server error {status} at {url}")

    await session.wait(QUERY_SETTLE_MS)

    if not await session.body_visible():
        return Outcome.failure("Page body is not visible")
    return Outcome.ok()


QUERY_PARAM_FUZZING = Check(
    name="queryParamFuzzing",
    arbitrary=path_with_params,
    predicate=query_param_fuzzing,
    description="Arbitrary query strings never produce a 5xx or a blank page.",
)
