"""
webfuzz/driver/base.py

Purpose:
    The abstract interface for "the browser".
    Defines the minimal capability a check needs to drive one interactive
    session, plus the event plumbing that carries page errors and dialogs
    from the session to whoever is listening.

Contract:
    - Every I/O method is async and may raise ElementNotInteractableError,
      ActionTimeoutError, NavigationError or DriverFatalError.
    - query_visible() never raises for a missing element; it answers False.
    - Events are delivered in the order the session produced them.
"""

from __future__ import annotations

import inspect
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional, Protocol, Union, runtime_checkable

from webfuzz.contracts.enums import EventKind, WaitPolicy

log = logging.getLogger("driver.events")


@dataclass(frozen=True)
class DriverEvent:
    kind: EventKind
    message: str
    # Present on dialogs; awaiting it closes the dialog
    dismiss: Optional[Callable[[], Awaitable[None]]] = None


@dataclass(frozen=True)
class FormField:
    """One fillable control found inside a form."""
    selector: str
    tag: str
    name: Optional[str] = None
    type: Optional[str] = None

    @property
    def skippable(self) -> bool:
        return self.type in ("hidden", "submit", "button")


EventHandler = Union[
    Callable[[DriverEvent], None],
    Callable[[DriverEvent], Awaitable[None]],
]

Unsubscribe = Callable[[], None]


@runtime_checkable
class SessionDriver(Protocol):
    """
    Interface for session drivers.
    Implementations:
    - PlaywrightSessionDriver (real Chromium page)
    - HttpSessionDriver (httpx, navigation only)
    """

    async def navigate(
        self,
        url: str,
        timeout: Optional[float] = None,
        wait_policy: WaitPolicy = WaitPolicy.DOM_CONTENT_LOADED,
    ) -> Optional[int]:
        """Load url and return the main response's HTTP status (None when there was no response)."""
        ...

    async def fill_field(self, selector: str, value: str) -> None:
        ...

    async def click_element(self, selector: str, force: bool = False) -> None:
        ...

    async def query_visible(self, selector: str) -> bool:
        ...

    async def list_fields(self, form_selector: str) -> List[FormField]:
        ...

    async def wait(self, milliseconds: float) -> None:
        ...

    async def current_url(self) -> str:
        ...

    async def reload(self, timeout: Optional[float] = None) -> Optional[int]:
        ...

    async def go_back(self, timeout: Optional[float] = None) -> None:
        """No-op when there is no history entry to go back to."""
        ...

    async def go_forward(self, timeout: Optional[float] = None) -> None:
        ...

    def subscribe(self, kind: EventKind, handler: EventHandler) -> Unsubscribe:
        ...

    async def close(self) -> None:
        ...


class EventDispatcher:
    """
    Per-driver publish/subscribe for session events.
    Handlers may be sync functions or coroutines; a failing handler is logged
    and never reaches the driver that emitted the event.
    """

    def __init__(self):
        self._handlers: Dict[EventKind, List[EventHandler]] = defaultdict(list)

    def subscribe(self, kind: EventKind, handler: EventHandler) -> Unsubscribe:
        self._handlers[kind].append(handler)
        log.debug(f"Subscribed {getattr(handler, '__name__', handler)!s} to {kind.value}")

        def unsubscribe() -> None:
            handlers = self._handlers.get(kind, [])
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def has_subscribers(self, kind: EventKind) -> bool:
        return bool(self._handlers.get(kind))

    async def emit(self, event: DriverEvent) -> None:
        # Snapshot: a handler may unsubscribe while we iterate
        for handler in list(self._handlers.get(event.kind, [])):
            await self._invoke(handler, event)

    async def _invoke(self, handler: EventHandler, event: DriverEvent) -> None:
        try:
            result = handler(event)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            log.error(f"Event handler error ({getattr(handler, '__name__', handler)!s}): {e}", exc_info=True)

    def clear(self) -> None:
        self._handlers.clear()
