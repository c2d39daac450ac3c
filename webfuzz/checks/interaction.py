"""
webfuzz/checks/interaction.py

Purpose:
    rapidClick: fires a burst of simultaneous clicks at one target to
    surface double-submit races. Targets are every form's submit control
    (or checkOptions.rapidClick.targetSelector) followed by every
    configured button.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from webfuzz.arbitraries import Arbitrary, integers, record
from webfuzz.base.config import FuzzConfig

from .base import Check, CheckSession, Outcome

CLICK_SETTLE_MS = 500
MIN_CLICKS = 2


@dataclass(frozen=True)
class ClickTarget:
    path: str
    selector: str


def click_targets(config: FuzzConfig) -> List[ClickTarget]:
    override = config.check_options.rapid_click.target_selector
    targets = [ClickTarget(form.path, override or form.submit) for form in config.forms]
    targets.extend(ClickTarget(button.path, button.selector) for button in config.buttons)
    return targets


def targets_configured(config: FuzzConfig) -> Optional[str]:
    return None if click_targets(config) else "No forms or buttons configured"


def click_bursts(config: FuzzConfig) -> Arbitrary[Dict[str, Any]]:
    return record({
        "targetIndex": integers(0, len(click_targets(config)) - 1),
        "clicks": integers(MIN_CLICKS, config.check_options.rapid_click.max_clicks),
    })


async def rapid_click(sample: Dict[str, Any], session: CheckSession, config: FuzzConfig) -> Outcome:
    target = click_targets(config)[sample["targetIndex"]]
    await session.goto(target.path)

    if not await session.is_visible(target.selector):
        # Nothing to click on this page
        return Outcome.ok()

    await session.join_actions(
        *(session.click(target.selector, force=True) for _ in range(sample["clicks"]))
    )
    await session.wait(CLICK_SETTLE_MS)

    if not await session.body_visible():
        return Outcome.failure("Page body is not visible after rapid clicks")
    return Outcome.ok()


RAPID_CLICK = Check(
    name="rapidClick",
    arbitrary=click_bursts,
    predicate=rapid_click,
    precondition=targets_configured,
    description="A burst of simultaneous clicks leaves a rendered page.",
)
