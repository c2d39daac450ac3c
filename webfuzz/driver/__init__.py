"""
webfuzz/driver
The SessionDriver capability and its adapters.

open_driver() imports PlaywrightSessionDriver on first use.
"""

from __future__ import annotations

from webfuzz.base.config import FuzzConfig
from webfuzz.contracts.enums import DriverType

from .auth import authenticate
from .base import DriverEvent, EventDispatcher, FormField, SessionDriver
from .http_driver import HttpSessionDriver


async def open_driver(config: FuzzConfig) -> SessionDriver:
    if config.driver == DriverType.HTTP:
        return HttpSessionDriver(timeout_ms=config.timeout_ms)

    from .playwright_driver import PlaywrightSessionDriver
    return await PlaywrightSessionDriver.launch(headless=config.headless, timeout_ms=config.timeout_ms)


__all__ = [
    "DriverEvent",
    "EventDispatcher",
    "FormField",
    "HttpSessionDriver",
    "SessionDriver",
    "authenticate",
    "open_driver",
]
