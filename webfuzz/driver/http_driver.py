"""
webfuzz/driver/http_driver.py

Purpose:
    Navigation-only SessionDriver on httpx for environments without a
    browser. Useful for server-side properties (noServerError,
    queryParamFuzzing, historyNavigation, reloadStateRestore).

Semantics:
    - Keeps its own back/forward history like a browser tab.
    - "body" (or any selector) is visible when the last response had a
      non-empty body and a status below 500.
    - There is no DOM: fill/click raise ElementNotInteractableError and
      list_fields() returns nothing. No page errors or dialogs are emitted.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Iterable, List, Optional

import httpx

from webfuzz.base.exceptions import ActionTimeoutError, DriverFatalError, ElementNotInteractableError, NavigationError
from webfuzz.contracts.enums import EventKind, WaitPolicy

from .base import EventDispatcher, EventHandler, FormField, Unsubscribe

log = logging.getLogger("driver.http")

USER_AGENT = "webfuzz/0.3 (+property-based testing)"
MAX_REDIRECTS = 5


class HttpSessionDriver:
    def __init__(
        self,
        timeout_ms: float = 5000,
        client: Optional[httpx.AsyncClient] = None,
        verify_tls: bool = False,
    ):
        self.timeout_ms = timeout_ms
        self._client = client or httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
            max_redirects=MAX_REDIRECTS,
            verify=verify_tls,
        )
        self._events = EventDispatcher()
        self._history: List[str] = []
        self._position = -1
        self._last_response: Optional[httpx.Response] = None

    def subscribe(self, kind: EventKind, handler: EventHandler) -> Unsubscribe:
        return self._events.subscribe(kind, handler)

    async def _fetch(self, url: str, timeout: Optional[float]) -> httpx.Response:
        if self._client.is_closed:
            raise DriverFatalError("HTTP client has been closed", details={"url": url})
        timeout_ms = timeout or self.timeout_ms
        try:
            response = await self._client.get(url, timeout=timeout_ms / 1000.0)
        except httpx.TimeoutException as e:
            raise ActionTimeoutError(f"GET {url}", timeout_ms) from e
        except httpx.HTTPError as e:
            raise NavigationError(url, str(e) or type(e).__name__) from e
        self._last_response = response
        log.debug(f"GET {url} -> {response.status_code}")
        return response

    async def navigate(
        self,
        url: str,
        timeout: Optional[float] = None,
        wait_policy: WaitPolicy = WaitPolicy.DOM_CONTENT_LOADED,
    ) -> Optional[int]:
        response = await self._fetch(url, timeout)
        # A new navigation drops the forward entries
        self._history = self._history[: self._position + 1]
        self._history.append(str(response.url))
        self._position = len(self._history) - 1
        return response.status_code

    async def fill_field(self, selector: str, value: str) -> None:
        raise ElementNotInteractableError(selector, "HTTP driver has no DOM")

    async def click_element(self, selector: str, force: bool = False) -> None:
        raise ElementNotInteractableError(selector, "HTTP driver has no DOM")

    async def query_visible(self, selector: str) -> bool:
        response = self._last_response
        return response is not None and response.status_code < 500 and bool(response.content.strip())

    async def list_fields(self, form_selector: str) -> List[FormField]:
        return []

    async def wait(self, milliseconds: float) -> None:
        await asyncio.sleep(milliseconds / 1000.0)

    async def current_url(self) -> str:
        if self._position < 0:
            return "about:blank"
        return self._history[self._position]

    async def reload(self, timeout: Optional[float] = None) -> Optional[int]:
        if self._position < 0:
            return None
        response = await self._fetch(self._history[self._position], timeout)
        self._history[self._position] = str(response.url)
        return response.status_code

    async def go_back(self, timeout: Optional[float] = None) -> None:
        if self._position <= 0:
            return
        self._position -= 1
        await self._fetch(self._history[self._position], timeout)

    async def go_forward(self, timeout: Optional[float] = None) -> None:
        if self._position >= len(self._history) - 1:
            return
        self._position += 1
        await self._fetch(self._history[self._position], timeout)

    async def set_extra_headers(self, headers: Dict[str, str]) -> None:
        self._client.headers.update(headers)

    async def add_cookies(self, cookies: Iterable[Dict[str, str]]) -> None:
        for cookie in cookies:
            self._client.cookies.set(
                cookie["name"], cookie["value"], domain=cookie.get("domain", ""), path=cookie.get("path", "/")
            )

    async def close(self) -> None:
        self._events.clear()
        if not self._client.is_closed:
            await self._client.aclose()
            log.info("HTTP driver client closed.")
