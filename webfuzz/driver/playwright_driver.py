"""
webfuzz/driver/playwright_driver.py

Purpose:
    SessionDriver backed by a real Chromium page (playwright.async_api).
    One browser, one context, one page per run.

Error mapping:
    - playwright TimeoutError            -> ActionTimeoutError
    - "...has been closed" errors        -> DriverFatalError
    - other errors on an element action  -> ElementNotInteractableError
    - other errors on a navigation       -> NavigationError

Timeouts are in milliseconds, like the config's timeout_ms.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Iterable, List, Optional

from playwright.async_api import Browser, BrowserContext, Dialog, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from webfuzz.base.exceptions import (
    ActionTimeoutError,
    DriverError,
    DriverFatalError,
    ElementNotInteractableError,
    NavigationError,
)
from webfuzz.contracts.enums import EventKind, WaitPolicy
from webfuzz.errors import ErrorCode

from .base import DriverEvent, EventDispatcher, EventHandler, FormField, Unsubscribe

log = logging.getLogger("driver.playwright")

FIELD_QUERY = "{form} input, {form} textarea, {form} select"

_CLOSED_MARKERS = ("has been closed", "Target closed", "Browser closed", "Connection closed")


def _is_closed_error(error: Exception) -> bool:
    message = str(error)
    return any(marker in message for marker in _CLOSED_MARKERS)


def _first_line(error: Exception) -> str:
    return str(error).strip().splitlines()[0] if str(error).strip() else type(error).__name__


class PlaywrightSessionDriver:
    """
    Wraps a Playwright page. Use launch() to build one; close() tears down
    page, context, browser and the Playwright server in that order.
    """

    def __init__(
        self,
        page: Page,
        context: BrowserContext,
        browser: Browser,
        playwright: Playwright,
        timeout_ms: float = 5000,
    ):
        self._page = page
        self._context = context
        self._browser = browser
        self._playwright = playwright
        self.timeout_ms = timeout_ms
        self._events = EventDispatcher()
        self._closed = False

        page.on("pageerror", self._on_page_error)
        page.on("dialog", self._on_dialog)
        page.on("close", self._on_close)

    @classmethod
    async def launch(cls, headless: bool = True, timeout_ms: float = 5000) -> "PlaywrightSessionDriver":
        playwright = await async_playwright().start()
        try:
            browser = await playwright.chromium.launch(headless=headless)
            context = await browser.new_context(ignore_https_errors=True)
            page = await context.new_page()
        except PlaywrightError as e:
            await playwright.stop()
            raise DriverError(
                ErrorCode.DRIVER_UNAVAILABLE,
                f"Could not start Chromium: {_first_line(e)} (try `playwright install chromium`)",
            ) from e

        page.set_default_timeout(timeout_ms)
        log.info(f"Chromium launched (headless={headless}, timeout={timeout_ms:.0f}ms)")
        return cls(page, context, browser, playwright, timeout_ms)

    # ------------------------------------------------------------------
    # Event plumbing
    # ------------------------------------------------------------------

    async def _on_page_error(self, error: PlaywrightError) -> None:
        await self._events.emit(DriverEvent(EventKind.PAGE_ERROR, getattr(error, "message", str(error))))

    async def _on_dialog(self, dialog: Dialog) -> None:
        # A dialog nobody listens to would block the page forever
        if not self._events.has_subscribers(EventKind.DIALOG):
            await dialog.dismiss()
            return
        await self._events.emit(DriverEvent(EventKind.DIALOG, dialog.message, dismiss=dialog.dismiss))

    def _on_close(self, _page: Page) -> None:
        self._closed = True

    def subscribe(self, kind: EventKind, handler: EventHandler) -> Unsubscribe:
        return self._events.subscribe(kind, handler)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _guard(self, action: str, target: str, element: bool = False,
                     timeout: Optional[float] = None) -> AsyncIterator[None]:
        if self._closed:
            raise DriverFatalError("Page has been closed", details={"action": action})
        try:
            yield
        except PlaywrightTimeoutError as e:
            raise ActionTimeoutError(f"{action} {target}", timeout or self.timeout_ms) from e
        except PlaywrightError as e:
            if self._closed or _is_closed_error(e):
                raise DriverFatalError(_first_line(e), details={"action": action}) from e
            if element:
                raise ElementNotInteractableError(target, _first_line(e)) from e
            raise NavigationError(target, _first_line(e)) from e

    async def navigate(
        self,
        url: str,
        timeout: Optional[float] = None,
        wait_policy: WaitPolicy = WaitPolicy.DOM_CONTENT_LOADED,
    ) -> Optional[int]:
        async with self._guard("navigate", url, timeout=timeout):
            response = await self._page.goto(
                url, timeout=timeout or self.timeout_ms, wait_until=wait_policy.value
            )
        return response.status if response is not None else None

    async def fill_field(self, selector: str, value: str) -> None:
        """Fill text controls; selects pick their first valued option, toggles get checked."""
        locator = self._page.locator(selector).first
        async with self._guard("fill", selector, element=True):
            tag = await locator.evaluate("el => el.tagName.toLowerCase()")
            kind = (await locator.get_attribute("type") or "").lower()
            if tag == "select":
                for option in await locator.locator("option").all():
                    option_value = await option.get_attribute("value")
                    if option_value:
                        await locator.select_option(option_value)
                        break
            elif kind in ("checkbox", "radio"):
                await locator.check()
            elif kind == "file":
                return
            else:
                await locator.fill(value)

    async def click_element(self, selector: str, force: bool = False) -> None:
        async with self._guard("click", selector, element=True):
            await self._page.locator(selector).first.click(force=force, timeout=self.timeout_ms)

    async def query_visible(self, selector: str) -> bool:
        """False for missing elements; only a closed session raises."""
        try:
            return await self._page.locator(selector).first.is_visible()
        except PlaywrightError as e:
            if self._closed or _is_closed_error(e):
                raise DriverFatalError(_first_line(e), details={"action": "query_visible"}) from e
            return False

    async def list_fields(self, form_selector: str) -> List[FormField]:
        query = FIELD_QUERY.format(form=form_selector)
        fields: List[FormField] = []
        async with self._guard("list_fields", form_selector, element=True):
            for index, locator in enumerate(await self._page.locator(query).all()):
                fields.append(
                    FormField(
                        selector=f"{query} >> nth={index}",
                        tag=await locator.evaluate("el => el.tagName.toLowerCase()"),
                        name=await locator.get_attribute("name"),
                        type=await locator.get_attribute("type"),
                    )
                )
        return fields

    async def wait(self, milliseconds: float) -> None:
        async with self._guard("wait", f"{milliseconds}ms"):
            await self._page.wait_for_timeout(milliseconds)

    async def current_url(self) -> str:
        if self._closed:
            raise DriverFatalError("Page has been closed", details={"action": "current_url"})
        return self._page.url

    async def reload(self, timeout: Optional[float] = None) -> Optional[int]:
        async with self._guard("reload", self._page.url, timeout=timeout):
            response = await self._page.reload(
                timeout=timeout or self.timeout_ms, wait_until=WaitPolicy.DOM_CONTENT_LOADED.value
            )
        return response.status if response is not None else None

    async def go_back(self, timeout: Optional[float] = None) -> None:
        async with self._guard("go_back", self._page.url, timeout=timeout):
            await self._page.go_back(timeout=timeout or self.timeout_ms)

    async def go_forward(self, timeout: Optional[float] = None) -> None:
        async with self._guard("go_forward", self._page.url, timeout=timeout):
            await self._page.go_forward(timeout=timeout or self.timeout_ms)

    # ------------------------------------------------------------------
    # Session setup used by authentication
    # ------------------------------------------------------------------

    async def set_extra_headers(self, headers: Dict[str, str]) -> None:
        await self._context.set_extra_http_headers(headers)

    async def add_cookies(self, cookies: Iterable[Dict[str, str]]) -> None:
        await self._context.add_cookies(list(cookies))

    async def close(self) -> None:
        self._events.clear()
        # Keep tearing down past individual failures
        for name, closer in (
            ("page", self._page.close),
            ("context", self._context.close),
            ("browser", self._browser.close),
            ("playwright", self._playwright.stop),
        ):
            try:
                await closer()
            except PlaywrightError as e:
                log.debug(f"Ignoring error while closing {name}: {_first_line(e)}")
        self._closed = True
