from __future__ import annotations

from enum import Enum


class CheckStatus(str, Enum):
    PASS = "pass"
    FAIL = "fail"
    SKIP = "skip"


class EventKind(str, Enum):
    PAGE_ERROR = "pageError"
    DIALOG = "dialog"


class WaitPolicy(str, Enum):
    COMMIT = "commit"
    DOM_CONTENT_LOADED = "domcontentloaded"
    LOAD = "load"
    NETWORK_IDLE = "networkidle"


class ReporterType(str, Enum):
    CONSOLE = "console"
    JSON = "json"
    HTML = "html"


class DriverType(str, Enum):
    PLAYWRIGHT = "playwright"
    HTTP = "http"


class AuthType(str, Enum):
    FORM = "form"
    COOKIE = "cookie"
    BEARER = "bearer"
