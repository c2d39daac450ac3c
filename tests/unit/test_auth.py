import pytest

from webfuzz.base.config import AuthConfig
from webfuzz.base.exceptions import DriverFatalError, NavigationError
from webfuzz.contracts.enums import AuthType
from webfuzz.driver import authenticate
from webfuzz.driver.auth import EMAIL_FIELD, PASSWORD_FIELD, POST_LOGIN_WAIT_MS, SUBMIT_BUTTON

BASE_URL = "https://shop.test/"


@pytest.mark.asyncio
async def test_bearer_sets_authorization_header(fake_driver):
    ok = await authenticate(fake_driver, AuthConfig(type=AuthType.BEARER, token="abc"), BASE_URL)
    assert ok
    assert fake_driver.headers == {"Authorization": "Bearer abc"}


@pytest.mark.asyncio
async def test_cookies_default_to_base_host_and_root_path(fake_driver):
    auth = AuthConfig(
        type=AuthType.COOKIE,
        cookies=({"name": "sid", "value": "1"}, {"name": "pref", "value": "dark", "domain": ".cdn.test", "path": "/ui"}),
    )

    assert await authenticate(fake_driver, auth, BASE_URL)
    assert fake_driver.cookies == [
        {"name": "sid", "value": "1", "domain": "shop.test", "path": "/"},
        {"name": "pref", "value": "dark", "domain": ".cdn.test", "path": "/ui"},
    ]


@pytest.mark.asyncio
async def test_form_login_fills_credentials_and_submits(make_driver):
    driver = make_driver(visible=("body", EMAIL_FIELD, PASSWORD_FIELD, SUBMIT_BUTTON))

    async def redirect_after_submit(selector):
        driver.url = "https://shop.test/account"

    driver.on_click = redirect_after_submit
    auth = AuthConfig(type=AuthType.FORM, login_url="/login", email="a@b.test", password="hunter2")

    assert await authenticate(driver, auth, BASE_URL)
    assert driver.calls[0] == ("navigate", "https://shop.test/login")
    assert ("fill", EMAIL_FIELD, "a@b.test") in driver.calls
    assert ("fill", PASSWORD_FIELD, "hunter2") in driver.calls
    assert ("click", SUBMIT_BUTTON, False) in driver.calls
    assert ("wait", POST_LOGIN_WAIT_MS) in driver.calls


@pytest.mark.asyncio
async def test_form_login_still_on_login_page(make_driver, caplog):
    driver = make_driver(visible=("body", EMAIL_FIELD))
    auth = AuthConfig(type=AuthType.FORM, login_url="/login", email="a@b.test")

    assert not await authenticate(driver, auth, BASE_URL)
    assert "Still on login page" in caplog.text


@pytest.mark.asyncio
async def test_driver_errors_are_warnings(make_driver, caplog):
    driver = make_driver()

    async def refuse(url):
        raise NavigationError(url, "net::ERR_NAME_NOT_RESOLVED")

    driver.on_navigate = refuse
    auth = AuthConfig(type=AuthType.FORM, login_url="/login", email="a@b.test")

    assert not await authenticate(driver, auth, BASE_URL)
    assert "Authentication failed" in caplog.text


@pytest.mark.asyncio
async def test_missing_token_is_reported_not_raised(fake_driver):
    assert not await authenticate(fake_driver, AuthConfig(type=AuthType.BEARER), BASE_URL)
    assert fake_driver.headers == {}


@pytest.mark.asyncio
async def test_dead_driver_propagates(make_driver):
    driver = make_driver()
    driver.closed = True
    auth = AuthConfig(type=AuthType.FORM, login_url="/login", email="a@b.test")

    with pytest.raises(DriverFatalError):
        await authenticate(driver, auth, BASE_URL)
