"""
webfuzz/base/exceptions.py
Typed exceptions for configuration, check definitions, trials and drivers.

Propagation rules:
    - SampleFailure, ElementNotInteractableError and ActionTimeoutError are
      caught by the property runner and become trial outcomes.
    - ConfigurationError (including GeneratorExhaustedError) and
      DriverFatalError are never caught by the runner.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

from webfuzz.errors import ErrorCode, WebFuzzError

if TYPE_CHECKING:
    from webfuzz.contracts.models import Report


class ConfigurationError(WebFuzzError):
    """Raised when a check or generator cannot run meaningfully with the given configuration."""
    def __init__(self, message: str, errors: Optional[List[str]] = None, code: ErrorCode = ErrorCode.CONFIG_INVALID):
        super().__init__(code, message, details={"errors": errors or []})
        self.errors = errors or []


class GeneratorExhaustedError(ConfigurationError):
    """Raised when a filtered arbitrary rejects every candidate within its retry budget."""
    def __init__(self, message: str, attempts: int):
        super().__init__(message, code=ErrorCode.CONFIG_GENERATOR_EXHAUSTED)
        self.attempts = attempts
        self.details["attempts"] = attempts


class CheckValidationError(WebFuzzError):
    """Raised when a registry entry does not conform to the Check shape."""
    def __init__(self, message: str, source: Optional[str] = None, code: ErrorCode = ErrorCode.CHECK_INVALID_SHAPE):
        super().__init__(code, message, details={"source": source})
        self.source = source


class SampleFailure(WebFuzzError):
    """Raised by a predicate to fail the current trial with a message."""
    def __init__(self, message: str):
        super().__init__(ErrorCode.SAMPLE_FAILED, message)


class DriverError(WebFuzzError):
    """Base exception for session driver failures."""


class ElementNotInteractableError(DriverError):
    """Raised when an element is missing, hidden or disabled. Predicates treat it as a no-op."""
    def __init__(self, selector: str, reason: str = "not interactable"):
        super().__init__(ErrorCode.DRIVER_NOT_INTERACTABLE, f"{selector}: {reason}", details={"selector": selector})
        self.selector = selector


class ActionTimeoutError(DriverError):
    """Raised when a driver action exceeds the configured per-action timeout."""
    def __init__(self, action: str, timeout_ms: float):
        super().__init__(
            ErrorCode.DRIVER_TIMEOUT,
            f"{action} timed out after {timeout_ms:.0f}ms",
            details={"action": action, "timeout_ms": timeout_ms},
        )
        self.action = action
        self.timeout_ms = timeout_ms


class DriverFatalError(DriverError):
    """Raised when the underlying session is unusable. Aborts the whole run."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorCode.DRIVER_FATAL, message, details=details)


class RunAbortedError(WebFuzzError):
    """Raised at the top of a run after a DriverFatalError; carries the partial report."""
    def __init__(self, cause: DriverFatalError, report: "Report"):
        super().__init__(ErrorCode.RUN_ABORTED, f"Run aborted: {cause.message}", details=cause.details)
        self.cause = cause
        self.report = report


class NavigationError(DriverError):
    """Raised when a navigation cannot reach the target (DNS, refused connection, aborted load)."""
    def __init__(self, url: str, reason: str):
        super().__init__(ErrorCode.DRIVER_NAVIGATION_FAILED, f"Navigation to {url} failed: {reason}", details={"url": url})
        self.url = url
