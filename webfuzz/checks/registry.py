"""
webfuzz/checks/registry.py

Purpose:
    Maps check names to validated Check objects. Built-ins are registered
    at construction; plugin files listed in the config are imported from
    explicit paths and must expose a module-level CHECK or CHECKS.

    Anything that does not have the Check shape is rejected up front with
    CheckValidationError, so a malformed plugin fails the run at startup
    instead of mid-way through.
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from webfuzz.arbitraries import Arbitrary
from webfuzz.base.config import FuzzConfig
from webfuzz.base.exceptions import CheckValidationError, ConfigurationError
from webfuzz.errors import ErrorCode

from .base import Check
from .inputs import FORM_FUZZING, QUERY_PARAM_FUZZING
from .interaction import RAPID_CLICK
from .navigation import HISTORY_NAVIGATION, NO_SERVER_ERROR, RELOAD_STATE_RESTORE

log = logging.getLogger("checks.registry")

# Declaration order is execution order
BUILTIN_CHECKS: Sequence[Check] = (
    NO_SERVER_ERROR,
    FORM_FUZZING,
    QUERY_PARAM_FUZZING,
    HISTORY_NAVIGATION,
    RAPID_CLICK,
    RELOAD_STATE_RESTORE,
)


def _is_async_callable(obj: Any) -> bool:
    if inspect.iscoroutinefunction(obj):
        return True
    call = getattr(obj, "__call__", None)
    return call is not None and inspect.iscoroutinefunction(call)


def validate_check(candidate: Any, source: Optional[str] = None) -> Check:
    """
    Accept a Check, or a mapping with name/arbitrary/predicate (and
    optionally precondition, fail_on_dialog, description).
    """
    if isinstance(candidate, Mapping):
        unknown = set(candidate) - {"name", "arbitrary", "predicate", "precondition", "fail_on_dialog", "description"}
        if unknown:
            raise CheckValidationError(f"Unknown check fields: {sorted(unknown)}", source=source)
        try:
            candidate = Check(**candidate)
        except TypeError as e:
            raise CheckValidationError(f"Incomplete check definition: {e}", source=source) from e

    if not isinstance(candidate, Check):
        raise CheckValidationError(
            f"Expected a Check, got {type(candidate).__name__}", source=source
        )
    if not isinstance(candidate.name, str) or not candidate.name.strip():
        raise CheckValidationError("Check name must be a non-empty string", source=source)
    if not (isinstance(candidate.arbitrary, Arbitrary) or callable(candidate.arbitrary)):
        raise CheckValidationError(
            f"Check {candidate.name!r}: arbitrary must be an Arbitrary or a callable taking the config",
            source=source,
        )
    if not _is_async_callable(candidate.predicate):
        raise CheckValidationError(f"Check {candidate.name!r}: predicate must be an async function", source=source)
    if candidate.precondition is not None and not callable(candidate.precondition):
        raise CheckValidationError(f"Check {candidate.name!r}: precondition must be callable", source=source)
    return candidate


class CheckRegistry:
    def __init__(self, builtins: Iterable[Check] = BUILTIN_CHECKS):
        self._checks: Dict[str, Check] = {}
        self._builtin_names: List[str] = []
        for check in builtins:
            self.register(check)
            self._builtin_names.append(check.name)

    def register(self, candidate: Any, source: Optional[str] = None, replace: bool = False) -> Check:
        check = validate_check(candidate, source)
        if check.name in self._checks and not replace:
            raise CheckValidationError(
                f"Duplicate check name: {check.name}", source=source, code=ErrorCode.CHECK_DUPLICATE
            )
        self._checks[check.name] = check
        log.debug(f"Registered check {check.name}" + (f" from {source}" if source else ""))
        return check

    def get(self, name: str) -> Check:
        try:
            return self._checks[name]
        except KeyError:
            raise ConfigurationError(f"Unknown check: {name}", code=ErrorCode.CONFIG_UNKNOWN_CHECK) from None

    def __contains__(self, name: object) -> bool:
        return name in self._checks

    def __len__(self) -> int:
        return len(self._checks)

    @property
    def names(self) -> List[str]:
        return list(self._checks)

    @property
    def plugin_names(self) -> List[str]:
        return [name for name in self._checks if name not in self._builtin_names]

    def load_plugins(self, paths: Iterable[str], base_dir: Optional[Path] = None) -> List[Check]:
        loaded: List[Check] = []
        for raw in paths:
            path = Path(raw)
            if not path.is_absolute() and base_dir is not None:
                path = base_dir / path
            loaded.extend(self._load_plugin(path.resolve()))
        return loaded

    def _load_plugin(self, path: Path) -> List[Check]:
        source = str(path)
        if not path.is_file():
            raise CheckValidationError(
                f"Custom check file not found: {path}", source=source, code=ErrorCode.CHECK_PLUGIN_LOAD_FAILED
            )

        spec = importlib.util.spec_from_file_location(f"webfuzz_plugin_{path.stem}", path)
        if spec is None or spec.loader is None:
            raise CheckValidationError(
                f"Cannot import {path}", source=source, code=ErrorCode.CHECK_PLUGIN_LOAD_FAILED
            )
        module = importlib.util.module_from_spec(spec)
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            raise CheckValidationError(
                f"Failed to load custom check {path.name}: {e}", source=source,
                code=ErrorCode.CHECK_PLUGIN_LOAD_FAILED,
            ) from e

        if hasattr(module, "CHECKS"):
            candidates = list(module.CHECKS)
        elif hasattr(module, "CHECK"):
            candidates = [module.CHECK]
        else:
            raise CheckValidationError(f"{path.name} defines neither CHECK nor CHECKS", source=source)

        checks = [self.register(candidate, source=source) for candidate in candidates]
        log.info(f"Loaded {len(checks)} custom check(s) from {path.name}")
        return checks

    def resolve(self, config: FuzzConfig, only: Optional[Sequence[str]] = None) -> List[Check]:
        """
        Checks to run, in order: enabled built-ins, then every plugin.
        `only` (the CLI's --check) bypasses the enable flags.
        """
        if only:
            return [self.get(name) for name in only]

        enabled = set(config.checks.enabled_names())
        selected = [self._checks[name] for name in self._builtin_names if name in enabled]
        selected.extend(self._checks[name] for name in self.plugin_names)
        return selected
