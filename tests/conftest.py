"""Pytest configuration and shared fakes for webfuzz."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Set, Tuple

import pytest

from webfuzz.base.config import FuzzConfig
from webfuzz.base.exceptions import DriverFatalError
from webfuzz.contracts.enums import EventKind, WaitPolicy
from webfuzz.driver.base import DriverEvent, EventDispatcher, FormField


class FakeDriver:
    """
    Scripted SessionDriver. Every call is appended to `calls` as a tuple
    (method, *args) so tests can assert on order and counts.
    """

    def __init__(
        self,
        statuses: Optional[Dict[str, int]] = None,
        visible: Iterable[str] = ("body",),
        fields: Optional[Dict[str, List[FormField]]] = None,
    ):
        self.statuses = statuses or {}
        self.visible: Set[str] = set(visible)
        self.fields = fields or {}
        self.calls: List[Tuple[Any, ...]] = []
        self.url = "about:blank"
        self.headers: Dict[str, str] = {}
        self.cookies: List[Dict[str, str]] = []
        self.closed = False
        self.events = EventDispatcher()

        # Optional hooks: async callables taking the call's arguments
        self.on_navigate: Optional[Callable[[str], Awaitable[None]]] = None
        self.on_click: Optional[Callable[[str], Awaitable[None]]] = None
        self.on_fill: Optional[Callable[[str, str], Awaitable[None]]] = None
        self.reload_url: Optional[str] = None

    def _check_open(self) -> None:
        if self.closed:
            raise DriverFatalError("Target page, context or browser has been closed")

    async def navigate(self, url: str, timeout: Optional[float] = None,
                       wait_policy: WaitPolicy = WaitPolicy.DOM_CONTENT_LOADED) -> Optional[int]:
        self._check_open()
        self.calls.append(("navigate", url))
        if self.on_navigate is not None:
            await self.on_navigate(url)
        self.url = url
        path = url.split("://", 1)[-1].split("/", 1)
        key = "/" + path[1].split("?", 1)[0] if len(path) > 1 else "/"
        return self.statuses.get(key, 200)

    async def fill_field(self, selector: str, value: str) -> None:
        self._check_open()
        self.calls.append(("fill", selector, value))
        if self.on_fill is not None:
            await self.on_fill(selector, value)

    async def click_element(self, selector: str, force: bool = False) -> None:
        self._check_open()
        self.calls.append(("click", selector, force))
        if self.on_click is not None:
            await self.on_click(selector)

    async def query_visible(self, selector: str) -> bool:
        self.calls.append(("query_visible", selector))
        return selector in self.visible

    async def list_fields(self, form_selector: str) -> List[FormField]:
        self.calls.append(("list_fields", form_selector))
        return list(self.fields.get(form_selector, []))

    async def wait(self, milliseconds: float) -> None:
        self.calls.append(("wait", milliseconds))

    async def current_url(self) -> str:
        return self.url

    async def reload(self, timeout: Optional[float] = None) -> Optional[int]:
        self._check_open()
        self.calls.append(("reload",))
        if self.reload_url is not None:
            self.url = self.reload_url
        return 200

    async def go_back(self, timeout: Optional[float] = None) -> None:
        self._check_open()
        self.calls.append(("go_back",))

    async def go_forward(self, timeout: Optional[float] = None) -> None:
        self._check_open()
        self.calls.append(("go_forward",))

    def subscribe(self, kind: EventKind, handler):
        return self.events.subscribe(kind, handler)

    async def emit_page_error(self, message: str) -> None:
        await self.events.emit(DriverEvent(EventKind.PAGE_ERROR, message))

    async def emit_dialog(self, message: str, dismiss=None) -> None:
        await self.events.emit(DriverEvent(EventKind.DIALOG, message, dismiss=dismiss))

    async def set_extra_headers(self, headers: Dict[str, str]) -> None:
        self.headers.update(headers)

    async def add_cookies(self, cookies: Iterable[Dict[str, str]]) -> None:
        self.cookies.extend(cookies)

    async def close(self) -> None:
        self.closed = True

    def count(self, method: str) -> int:
        return sum(1 for call in self.calls if call[0] == method)


@pytest.fixture
def make_driver():
    return FakeDriver


@pytest.fixture
def fake_driver() -> FakeDriver:
    return FakeDriver()


@pytest.fixture
def config() -> FuzzConfig:
    return FuzzConfig(base_url="http://app.test", num_runs=20, timeout_ms=1000, seed=42)
