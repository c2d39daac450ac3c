"""
webfuzz/checks/navigation.py

Purpose:
    Checks that only move the session around: plain page loads, history
    walks and reloads.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from webfuzz.arbitraries import Arbitrary, bounded_collection, constant, one_of, path_arbitrary
from webfuzz.base.config import FuzzConfig
from webfuzz.base.exceptions import DriverError, DriverFatalError

from .base import Check, CheckSession, Outcome

log = logging.getLogger("checks.navigation")

MAX_HISTORY_ACTIONS = 15


def config_paths(config: FuzzConfig) -> Arbitrary[str]:
    return path_arbitrary(config.paths.include, config.paths.exclude)


# ============================================================================
# noServerError
# ============================================================================

async def no_server_error(path: str, session: CheckSession, config: FuzzConfig) -> Optional[Outcome]:
    url = config.url_for(path)
    status = await session.navigate(url)
    if status is not None and status >= 500:
        return Outcome.failure(f"Server error {status} at {url}")
    return None


NO_SERVER_ERROR = Check(
    name="noServerError",
    arbitrary=config_paths,
    predicate=no_server_error,
    description="Every reachable path answers with a status below 500.",
)


# ============================================================================
# historyNavigation
# ============================================================================

def history_actions(config: FuzzConfig) -> Arbitrary[List[Dict[str, Any]]]:
    action = one_of(
        constant({"type": "back"}),
        constant({"type": "forward"}),
        config_paths(config).map(lambda path: {"type": "navigate", "path": path}),
    )
    return bounded_collection(action, min_size=1, max_size=MAX_HISTORY_ACTIONS)


async def history_navigation(actions: List[Dict[str, Any]], session: CheckSession, config: FuzzConfig) -> Outcome:
    await session.navigate(config.base_url)

    for action in actions:
        try:
            if action["type"] == "back":
                await session.go_back()
            elif action["type"] == "forward":
                await session.go_forward()
            else:
                await session.goto(action["path"])
        except DriverFatalError:
            raise
        except DriverError as e:
            # Navigation errors mid-walk are expected
            log.debug(f"history action {action} failed: {e.message}")

    if not await session.body_visible():
        return Outcome.failure("Page body is not visible after history navigation")
    return Outcome.ok()


HISTORY_NAVIGATION = Check(
    name="historyNavigation",
    arbitrary=history_actions,
    predicate=history_navigation,
    description="Any sequence of back/forward/navigate leaves a rendered page.",
)


# ============================================================================
# reloadStateRestore
# ============================================================================

async def reload_state_restore(path: str, session: CheckSession, config: FuzzConfig) -> Outcome:
    await session.goto(path)
    before = await session.current_url()
    await session.reload()
    after = await session.current_url()

    if after != before:
        return Outcome.failure(f"URL changed after reload: {before} -> {after}")
    if not await session.body_visible():
        return Outcome.failure("Page body is not visible after reload")
    return Outcome.ok()


RELOAD_STATE_RESTORE = Check(
    name="reloadStateRestore",
    arbitrary=config_paths,
    predicate=reload_state_restore,
    description="Reloading a page keeps its URL and leaves it rendered.",
)
