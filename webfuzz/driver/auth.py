"""
webfuzz/driver/auth.py

Purpose:
    Establishes an authenticated session before any check runs.

    bearer -> "Authorization: Bearer <token>" on every request
    cookie -> pre-issued cookies added to the session's jar
    form   -> navigate to the login page, fill credentials, submit
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Protocol, runtime_checkable
from urllib.parse import urlparse

from webfuzz.base.config import AuthConfig
from webfuzz.base.exceptions import ConfigurationError, DriverError, DriverFatalError
from webfuzz.contracts.enums import AuthType

from .base import SessionDriver

logger = logging.getLogger(__name__)

EMAIL_FIELD = 'input[type="email"], input[name="email"], input[name="username"], input[name="user"]'
PASSWORD_FIELD = 'input[type="password"]'
SUBMIT_BUTTON = (
    'button[type="submit"], input[type="submit"], '
    'button:has-text("Login"), button:has-text("Sign in")'
)

# Let a login redirect settle before checking where we ended up
POST_LOGIN_WAIT_MS = 1000


@runtime_checkable
class SessionSetup(Protocol):
    async def set_extra_headers(self, headers: Dict[str, str]) -> None:
        ...

    async def add_cookies(self, cookies: Iterable[Dict[str, str]]) -> None:
        ...


async def authenticate(driver: SessionDriver, auth: AuthConfig, base_url: str) -> bool:
    """
    Apply auth to the driver's session. Returns False (after logging a
    warning) when authentication did not visibly succeed; the run goes on.
    DriverFatalError propagates.
    """
    logger.info(f"Authenticating with {auth.type.value}...")
    try:
        if auth.type == AuthType.BEARER:
            ok = await _bearer(driver, auth)
        elif auth.type == AuthType.COOKIE:
            ok = await _cookies(driver, auth, base_url)
        else:
            ok = await _form(driver, auth, base_url)
    except DriverFatalError:
        raise
    except (DriverError, ConfigurationError) as e:
        logger.warning(f"Authentication failed: {e.message}")
        return False

    if not ok:
        logger.warning("Authentication may have failed")
    return ok


def _require_setup(driver: SessionDriver) -> SessionSetup:
    if not isinstance(driver, SessionSetup):
        raise ConfigurationError(f"{type(driver).__name__} does not support header/cookie setup")
    return driver


async def _bearer(driver: SessionDriver, auth: AuthConfig) -> bool:
    if not auth.token:
        raise ConfigurationError("Bearer auth requires token")
    await _require_setup(driver).set_extra_headers({"Authorization": f"Bearer {auth.token}"})
    return True


async def _cookies(driver: SessionDriver, auth: AuthConfig, base_url: str) -> bool:
    if not auth.cookies:
        raise ConfigurationError("Cookie auth requires cookies")
    hostname = urlparse(base_url).hostname or ""
    cookies = [
        {
            "name": cookie["name"],
            "value": cookie["value"],
            "domain": cookie.get("domain") or hostname,
            "path": cookie.get("path") or "/",
        }
        for cookie in auth.cookies
    ]
    await _require_setup(driver).add_cookies(cookies)
    return True


async def _form(driver: SessionDriver, auth: AuthConfig, base_url: str) -> bool:
    if not auth.login_url or auth.email is None:
        raise ConfigurationError("Form auth requires loginUrl and credentials")

    await driver.navigate(base_url.rstrip("/") + auth.login_url)

    if await driver.query_visible(EMAIL_FIELD):
        await driver.fill_field(EMAIL_FIELD, auth.email)
    if auth.password is not None and await driver.query_visible(PASSWORD_FIELD):
        await driver.fill_field(PASSWORD_FIELD, auth.password)
    if await driver.query_visible(SUBMIT_BUTTON):
        await driver.click_element(SUBMIT_BUTTON)

    await driver.wait(POST_LOGIN_WAIT_MS)

    if auth.login_url in await driver.current_url():
        logger.warning("Still on login page after authentication attempt")
        return False
    return True
