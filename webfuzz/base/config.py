# ============================================================================
# webfuzz/base/config.py
# Run Configuration Management
# ============================================================================
#
# PURPOSE:
# Defines every value the fuzzing engine consumes: the target, the trial
# budget, timeouts, path globs, form/button descriptors and per-check tuning.
# The engine only ever sees a FuzzConfig instance; how it was loaded (YAML
# file, environment, CLI flags) stays in this module.
#
# KEY CONCEPTS:
# 1. Frozen dataclasses: a config is resolved once per run and never mutated
# 2. camelCase on disk: the YAML document uses baseUrl/numRuns/... keys
# 3. Environment overrides: WEBFUZZ_* variables win over the file
# 4. validate(): returns human-readable errors instead of raising one by one
#
# ============================================================================

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple
from urllib.parse import urlparse

import yaml

from webfuzz.base.exceptions import ConfigurationError
from webfuzz.contracts.enums import AuthType, DriverType, ReporterType
from webfuzz.errors import ErrorCode

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "webfuzz.config.yaml"


# ============================================================================
# Target Surface Configuration
# ============================================================================
# Which paths are fair game and which interactive elements the checks drive.

@dataclass(frozen=True)
class PathConfig:
    # Globs to draw paths from; "/docs/**" contributes its base "/docs"
    include: Tuple[str, ...] = ("/",)

    # Globs that must never be visited (logout links, admin areas, ...)
    exclude: Tuple[str, ...] = ()


@dataclass(frozen=True)
class FormTarget:
    path: str
    selector: str
    submit: str


@dataclass(frozen=True)
class ButtonTarget:
    path: str
    selector: str


@dataclass(frozen=True)
class AuthConfig:
    type: AuthType

    # form: where to log in and with what
    login_url: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None

    # cookie: pre-issued session cookies ({name, value, domain?, path?})
    cookies: Tuple[Dict[str, str], ...] = ()

    # bearer: sent as "Authorization: Bearer <token>" on every request
    token: Optional[str] = None


# ============================================================================
# Check Selection & Tuning
# ============================================================================

@dataclass(frozen=True)
class ChecksConfig:
    # Field order is the execution order of the built-in checks
    no_server_error: bool = True
    # Off until forms are configured; validate() rejects it without forms
    form_fuzzing: bool = False
    query_param_fuzzing: bool = True
    history_navigation: bool = True
    rapid_click: bool = True
    reload_state_restore: bool = False

    # Maps snake_case fields to the public check names
    NAMES = {
        "no_server_error": "noServerError",
        "form_fuzzing": "formFuzzing",
        "query_param_fuzzing": "queryParamFuzzing",
        "history_navigation": "historyNavigation",
        "rapid_click": "rapidClick",
        "reload_state_restore": "reloadStateRestore",
    }

    def enabled_names(self) -> List[str]:
        return [self.NAMES[f.name] for f in fields(self) if getattr(self, f.name)]

    def is_enabled(self, check_name: str) -> bool:
        return check_name in self.enabled_names()


@dataclass(frozen=True)
class RapidClickOptions:
    # Upper bound for simultaneous clicks in one trial (lower bound is 2)
    max_clicks: int = 10

    # Overrides each form's submit selector when set
    target_selector: Optional[str] = None


@dataclass(frozen=True)
class QueryParamOptions:
    # Parameter names to fuzz; empty means random names
    params: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CheckOptions:
    rapid_click: RapidClickOptions = field(default_factory=RapidClickOptions)
    query_param_fuzzing: QueryParamOptions = field(default_factory=QueryParamOptions)


# ============================================================================
# Logging Configuration
# ============================================================================

@dataclass(frozen=True)
class LogConfig:
    # DEBUG shows every trial and shrink step; INFO shows one line per check
    level: str = "INFO"

    format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    # Optional log file; rotated at max_file_size_mb, backup_count files kept
    file: Optional[Path] = None
    max_file_size_mb: int = 10
    backup_count: int = 3


# ============================================================================
# Master Configuration Container
# ============================================================================

@dataclass(frozen=True)
class FuzzConfig:
    base_url: str = "http://localhost:3000"

    # Trials per check (a failing check stops early and shrinks)
    num_runs: int = 50

    # Per-action timeout for every driver call, in milliseconds
    timeout_ms: int = 5000

    headless: bool = True
    driver: DriverType = DriverType.PLAYWRIGHT

    # Predicate invocations allowed while shrinking one counterexample
    max_shrink_attempts: int = 500

    # Fixed run seed; None draws a fresh one that is printed in the report
    seed: Optional[int] = None

    paths: PathConfig = field(default_factory=PathConfig)
    forms: Tuple[FormTarget, ...] = ()
    buttons: Tuple[ButtonTarget, ...] = ()
    checks: ChecksConfig = field(default_factory=ChecksConfig)
    check_options: CheckOptions = field(default_factory=CheckOptions)

    # Plugin files exposing CHECK/CHECKS, resolved against config_dir
    custom_checks: Tuple[str, ...] = ()
    config_dir: Optional[Path] = None

    reporter: ReporterType = ReporterType.CONSOLE
    auth: Optional[AuthConfig] = None
    log: LogConfig = field(default_factory=LogConfig)

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0

    def url_for(self, path: str) -> str:
        """Join a sampled path onto the base URL the way a browser resolves it."""
        if not path.startswith("/"):
            path = "/" + path
        return self.base_url.rstrip("/") + path

    def with_overrides(self, **overrides: Any) -> "FuzzConfig":
        """Return a copy with non-None overrides applied (CLI flags)."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def validate(self) -> List[str]:
        errors: List[str] = []

        if not self.base_url:
            errors.append("baseUrl is required")
        else:
            parsed = urlparse(self.base_url)
            if parsed.scheme not in ("http", "https") or not parsed.netloc:
                errors.append(f"Invalid baseUrl: {self.base_url}")

        if self.num_runs < 1:
            errors.append("numRuns must be at least 1")
        if self.timeout_ms < 0:
            errors.append("timeout must be non-negative")
        if self.max_shrink_attempts < 0:
            errors.append("maxShrinkAttempts must be non-negative")
        if not self.paths.include:
            errors.append("paths.include must have at least one path")

        if self.checks.form_fuzzing and not self.forms:
            errors.append("formFuzzing is enabled but no forms are configured")

        for form in self.forms:
            if not form.path:
                errors.append("Form path is required")
            if not form.selector:
                errors.append("Form selector is required")
            if not form.submit:
                errors.append("Form submit selector is required")

        for button in self.buttons:
            if not button.path:
                errors.append("Button path is required")
            if not button.selector:
                errors.append("Button selector is required")

        if self.check_options.rapid_click.max_clicks < 2:
            errors.append("checkOptions.rapidClick.maxClicks must be at least 2")

        if self.auth is not None:
            if self.auth.type == AuthType.FORM and not (self.auth.login_url and self.auth.email is not None):
                errors.append("Form auth requires loginUrl and credentials")
            if self.auth.type == AuthType.COOKIE and not self.auth.cookies:
                errors.append("Cookie auth requires cookies")
            if self.auth.type == AuthType.BEARER and not self.auth.token:
                errors.append("Bearer auth requires token")

        return errors

    # ------------------------------------------------------------------
    # Builders
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], config_dir: Optional[Path] = None) -> "FuzzConfig":
        """
        Build a config from the camelCase document form.
        Missing keys keep their defaults; "checks" merges over the defaults.
        """
        try:
            return cls._from_dict(data, config_dir)
        except (TypeError, ValueError, KeyError, AttributeError) as e:
            raise ConfigurationError(
                f"Malformed configuration: {e}", code=ErrorCode.CONFIG_PARSE_ERROR
            ) from e

    @classmethod
    def _from_dict(cls, data: Mapping[str, Any], config_dir: Optional[Path]) -> "FuzzConfig":
        defaults = cls()

        paths_data = data.get("paths") or {}
        paths = PathConfig(
            include=tuple(paths_data.get("include", defaults.paths.include)),
            exclude=tuple(paths_data.get("exclude", defaults.paths.exclude)),
        )

        forms = tuple(
            FormTarget(path=f["path"], selector=f["selector"], submit=f["submit"])
            for f in data.get("forms") or ()
        )
        buttons = tuple(
            ButtonTarget(path=b["path"], selector=b["selector"])
            for b in data.get("buttons") or ()
        )

        checks_data = data.get("checks") or {}
        reverse_names = {public: attr for attr, public in ChecksConfig.NAMES.items()}
        unknown = [name for name in checks_data if name not in reverse_names]
        if unknown:
            raise ValueError(f"unknown checks: {', '.join(unknown)}")
        checks = ChecksConfig(**{reverse_names[name]: bool(flag) for name, flag in checks_data.items()})

        options_data = data.get("checkOptions") or {}
        rapid_data = options_data.get("rapidClick") or {}
        query_data = options_data.get("queryParamFuzzing") or {}
        check_options = CheckOptions(
            rapid_click=RapidClickOptions(
                max_clicks=int(rapid_data.get("maxClicks", RapidClickOptions.max_clicks)),
                target_selector=rapid_data.get("targetSelector"),
            ),
            query_param_fuzzing=QueryParamOptions(params=tuple(query_data.get("params") or ())),
        )

        auth = None
        auth_data = data.get("auth")
        if auth_data:
            credentials = auth_data.get("credentials") or {}
            auth = AuthConfig(
                type=AuthType(auth_data["type"]),
                login_url=auth_data.get("loginUrl"),
                email=credentials.get("email"),
                password=credentials.get("password"),
                cookies=tuple(dict(c) for c in auth_data.get("cookies") or ()),
                token=auth_data.get("token"),
            )

        log_data = data.get("log") or {}
        log = LogConfig(
            level=str(log_data.get("level", LogConfig.level)).upper(),
            file=Path(log_data["file"]) if log_data.get("file") else None,
        )

        seed = data.get("seed")
        return cls(
            base_url=data.get("baseUrl", defaults.base_url),
            num_runs=int(data.get("numRuns", defaults.num_runs)),
            timeout_ms=int(data.get("timeout", defaults.timeout_ms)),
            headless=bool(data.get("headless", defaults.headless)),
            driver=DriverType(data.get("driver", defaults.driver.value)),
            max_shrink_attempts=int(data.get("maxShrinkAttempts", defaults.max_shrink_attempts)),
            seed=int(seed) if seed is not None else None,
            paths=paths,
            forms=forms,
            buttons=buttons,
            checks=checks,
            check_options=check_options,
            custom_checks=tuple(data.get("customChecks") or ()),
            config_dir=config_dir,
            reporter=ReporterType(data.get("reporter", defaults.reporter.value)),
            auth=auth,
            log=log,
        )

    @classmethod
    def from_env(cls, base: Optional["FuzzConfig"] = None) -> "FuzzConfig":
        """
        Apply WEBFUZZ_* environment overrides on top of base (or defaults).
        Environment variables are strings, so each is converted explicitly.
        """
        cfg = base or cls()
        overrides: Dict[str, Any] = {}

        if os.getenv("WEBFUZZ_BASE_URL"):
            overrides["base_url"] = os.environ["WEBFUZZ_BASE_URL"]
        if os.getenv("WEBFUZZ_NUM_RUNS"):
            overrides["num_runs"] = int(os.environ["WEBFUZZ_NUM_RUNS"])
        if os.getenv("WEBFUZZ_TIMEOUT"):
            overrides["timeout_ms"] = int(os.environ["WEBFUZZ_TIMEOUT"])
        if os.getenv("WEBFUZZ_SEED"):
            overrides["seed"] = int(os.environ["WEBFUZZ_SEED"])
        if os.getenv("WEBFUZZ_HEADLESS"):
            overrides["headless"] = os.environ["WEBFUZZ_HEADLESS"].lower() == "true"
        if os.getenv("WEBFUZZ_DRIVER"):
            overrides["driver"] = DriverType(os.environ["WEBFUZZ_DRIVER"])
        if os.getenv("WEBFUZZ_LOG_LEVEL"):
            overrides["log"] = replace(cfg.log, level=os.environ["WEBFUZZ_LOG_LEVEL"].upper())

        return replace(cfg, **overrides)


def load_config(path: str | Path) -> FuzzConfig:
    """
    Load a YAML config document and apply environment overrides.
    A missing file falls back to defaults with a warning. JSON documents
    load too, since they are valid YAML.
    """
    config_path = Path(path)
    if not config_path.exists():
        logger.warning(f"Config file not found: {config_path}, using defaults")
        return FuzzConfig.from_env(FuzzConfig(config_dir=config_path.resolve().parent))

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Cannot parse {config_path}: {e}", code=ErrorCode.CONFIG_PARSE_ERROR
        ) from e
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"{config_path} must contain a mapping at the top level", code=ErrorCode.CONFIG_PARSE_ERROR
        )

    return FuzzConfig.from_env(FuzzConfig.from_dict(data, config_dir=config_path.resolve().parent))


def setup_logging(config: Optional[FuzzConfig] = None, verbose: bool = False) -> None:
    """
    Configure Python's logging system for a run.

    Console handler always; a rotating file handler when log.file is set.
    verbose forces DEBUG regardless of the configured level.
    """
    cfg = config or FuzzConfig()

    handlers: List[logging.Handler] = [logging.StreamHandler()]

    if cfg.log.file is not None:
        from logging.handlers import RotatingFileHandler
        cfg.log.file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                cfg.log.file,
                maxBytes=cfg.log.max_file_size_mb * 1024 * 1024,
                backupCount=cfg.log.backup_count,
            )
        )

    level = logging.DEBUG if verbose else getattr(logging, cfg.log.level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=cfg.log.format, handlers=handlers, force=True)

    # Filter noisier logs
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


# Written by `webfuzz --init`
CONFIG_TEMPLATE = """\
# webfuzz.config.yaml

baseUrl: http://localhost:3000

# Run settings
numRuns: 50              # trials per check
timeout: 5000            # per-action timeout (ms)
headless: true
driver: playwright       # playwright | http
# seed: 12345            # fixed seed to replay a run

# Authentication (optional)
# auth:
#   type: form           # form | cookie | bearer
#   loginUrl: /login
#   credentials:
#     email: test@example.com
#     password: testpass
#   # or
#   # type: cookie
#   # cookies:
#   #   - name: session
#   #     value: xxx
#   # or
#   # type: bearer
#   # token: xxx

# Paths to visit
paths:
  include:
    - /
  exclude:
    - /admin/**
    - /api/**

# Forms for formFuzzing and rapidClick
forms: []
  # - path: /contact
  #   selector: form
  #   submit: button[type="submit"]

# Buttons for rapidClick
buttons: []
  # - path: /cart
  #   selector: "#checkout"

checks:
  noServerError: true
  formFuzzing: false       # enable once forms are configured
  queryParamFuzzing: true
  historyNavigation: true
  rapidClick: false        # enable once forms or buttons are configured
  reloadStateRestore: false

# Per-check tuning (optional)
# checkOptions:
#   rapidClick:
#     maxClicks: 10
#     targetSelector: button[type="submit"]
#   queryParamFuzzing:
#     params: [q, page, sort, filter]

# Plugin files exposing CHECK or CHECKS (optional)
# customChecks:
#   - ./checks/my_check.py

reporter: console        # console | json | html
"""
