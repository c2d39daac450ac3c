"""
webfuzz/checks/base.py

Purpose:
    What a check is, and the session object its predicate talks to.

    A Check pairs an Arbitrary with an async predicate. The predicate gets
    (sample, session, config) and answers with an Outcome, a bool, or None
    (success). Raising anything other than DriverFatalError fails the trial.

    CheckSession wraps the driver for the duration of one check:
    - subscribes to page errors and dialogs on entry, unsubscribes on exit
    - dismisses every dialog it sees
    - bounds each driver call by the configured action timeout
    - buffers signals per trial (begin_trial / end_trial)
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Optional, Tuple, TypeVar, Union

from webfuzz.arbitraries import Arbitrary
from webfuzz.base.config import FuzzConfig
from webfuzz.base.exceptions import ActionTimeoutError, DriverFatalError
from webfuzz.contracts.enums import EventKind, WaitPolicy
from webfuzz.driver.base import DriverEvent, FormField, SessionDriver, Unsubscribe

log = logging.getLogger("checks.session")

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome:
    passed: bool
    message: Optional[str] = None

    @classmethod
    def ok(cls) -> "Outcome":
        return cls(True)

    @classmethod
    def failure(cls, message: str) -> "Outcome":
        return cls(False, message)

    @classmethod
    def coerce(cls, value: Any) -> "Outcome":
        """Predicate return value -> Outcome. Only False and failed Outcomes fail."""
        if isinstance(value, Outcome):
            return value
        if value is False:
            return cls.failure("Property returned false")
        return cls.ok()


Predicate = Callable[[Any, "CheckSession", FuzzConfig], Awaitable[Union[Outcome, bool, None]]]
ArbitrarySource = Union[Arbitrary[Any], Callable[[FuzzConfig], Arbitrary[Any]]]


@dataclass(frozen=True)
class Check:
    name: str
    arbitrary: ArbitrarySource
    predicate: Predicate
    # Returns a skip reason when the check cannot run with this config
    precondition: Optional[Callable[[FuzzConfig], Optional[str]]] = None
    fail_on_dialog: bool = False
    description: str = ""

    def arbitrary_for(self, config: FuzzConfig) -> Arbitrary[Any]:
        if isinstance(self.arbitrary, Arbitrary):
            return self.arbitrary
        return self.arbitrary(config)

    def skip_reason(self, config: FuzzConfig) -> Optional[str]:
        return self.precondition(config) if self.precondition is not None else None


@dataclass(frozen=True)
class TrialSignals:
    page_errors: Tuple[str, ...] = ()
    dialogs: Tuple[str, ...] = ()


@dataclass
class CheckSession:
    driver: SessionDriver
    config: FuzzConfig
    _page_errors: List[str] = field(default_factory=list, init=False, repr=False)
    _dialogs: List[str] = field(default_factory=list, init=False, repr=False)
    _unsubscribers: List[Unsubscribe] = field(default_factory=list, init=False, repr=False)

    async def __aenter__(self) -> "CheckSession":
        self._unsubscribers = [
            self.driver.subscribe(EventKind.PAGE_ERROR, self._on_page_error),
            self.driver.subscribe(EventKind.DIALOG, self._on_dialog),
        ]
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    def _on_page_error(self, event: DriverEvent) -> None:
        self._page_errors.append(event.message)

    async def _on_dialog(self, event: DriverEvent) -> None:
        self._dialogs.append(event.message)
        if event.dismiss is not None:
            await event.dismiss()

    # ------------------------------------------------------------------
    # Trial window
    # ------------------------------------------------------------------

    def begin_trial(self) -> None:
        self._page_errors.clear()
        self._dialogs.clear()

    def end_trial(self) -> TrialSignals:
        return TrialSignals(tuple(self._page_errors), tuple(self._dialogs))

    # ------------------------------------------------------------------
    # Bounded driver capability
    # ------------------------------------------------------------------

    async def _bounded(self, action: str, awaitable: Awaitable[T]) -> T:
        # timeout 0 means unbounded, as in Playwright
        limit = self.config.timeout_seconds or None
        try:
            return await asyncio.wait_for(awaitable, timeout=limit)
        except asyncio.TimeoutError as e:
            raise ActionTimeoutError(action, self.config.timeout_ms) from e

    async def navigate(self, url: str, wait_policy: WaitPolicy = WaitPolicy.DOM_CONTENT_LOADED) -> Optional[int]:
        return await self._bounded(
            f"navigate {url}", self.driver.navigate(url, self.config.timeout_ms, wait_policy)
        )

    async def goto(self, path: str) -> Optional[int]:
        """Navigate to a path under the configured base URL."""
        return await self.navigate(self.config.url_for(path))

    async def fill(self, selector: str, value: str) -> None:
        await self._bounded(f"fill {selector}", self.driver.fill_field(selector, value))

    async def click(self, selector: str, force: bool = False) -> None:
        await self._bounded(f"click {selector}", self.driver.click_element(selector, force))

    async def is_visible(self, selector: str) -> bool:
        return await self._bounded(f"query {selector}", self.driver.query_visible(selector))

    async def body_visible(self) -> bool:
        return await self.is_visible("body")

    async def list_fields(self, form_selector: str) -> List[FormField]:
        return await self._bounded(f"list fields {form_selector}", self.driver.list_fields(form_selector))

    async def wait(self, milliseconds: float) -> None:
        # Deliberate pauses are not driver actions
        await self.driver.wait(milliseconds)

    async def current_url(self) -> str:
        return await self._bounded("current_url", self.driver.current_url())

    async def reload(self) -> Optional[int]:
        return await self._bounded("reload", self.driver.reload(self.config.timeout_ms))

    async def go_back(self) -> None:
        await self._bounded("go_back", self.driver.go_back(self.config.timeout_ms))

    async def go_forward(self) -> None:
        await self._bounded("go_forward", self.driver.go_forward(self.config.timeout_ms))

    async def join_actions(self, *awaitables: Awaitable[Any]) -> List[Any]:
        """
        Run actions concurrently and wait for all of them. Individual
        failures are tolerated (returned in place of a result) except
        DriverFatalError, which is re-raised after every action settled.
        """
        results = await asyncio.gather(*awaitables, return_exceptions=True)
        for result in results:
            if isinstance(result, (DriverFatalError, asyncio.CancelledError)):
                raise result
            if isinstance(result, Exception):
                log.debug(f"Concurrent action failed: {result}")
        return list(results)
