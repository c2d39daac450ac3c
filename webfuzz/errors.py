"""Module errors: structured error codes shared by the runner, the drivers and the CLI."""
#
from enum import Enum
from typing import Dict, Any, Optional
# PURPOSE:
# Provides the error taxonomy for webfuzz with error codes, typed exceptions,
# and consistent handling between the engine and the command line.
#
# ERROR CODE FORMAT:
# - CONFIG_XXX: Configuration and generator errors (fatal at startup)
# - CHECK_XXX: Check definition and plugin errors
# - SAMPLE_XXX: Trial-level failures (recoverable, feed shrinking)
# - DRIVER_XXX: Session driver errors
# - RUN_XXX: Run-level aborts
#
# USAGE:
#   from webfuzz.errors import WebFuzzError, ErrorCode
#
#   raise WebFuzzError(
#       ErrorCode.CONFIG_INVALID,
#       "numRuns must be at least 1",
#       details={"numRuns": 0}
#   )
#
class ErrorCode(Enum):
    # Configuration Errors
    CONFIG_INVALID = "CONFIG_001"
    CONFIG_FILE_NOT_FOUND = "CONFIG_002"
    CONFIG_PARSE_ERROR = "CONFIG_003"
    CONFIG_GENERATOR_EXHAUSTED = "CONFIG_004"
    CONFIG_UNKNOWN_CHECK = "CONFIG_005"

    # Check Errors
    CHECK_INVALID_SHAPE = "CHECK_001"
    CHECK_DUPLICATE = "CHECK_002"
    CHECK_PLUGIN_LOAD_FAILED = "CHECK_003"

    # Sample Errors
    SAMPLE_FAILED = "SAMPLE_001"

    # Driver Errors
    DRIVER_NOT_INTERACTABLE = "DRIVER_001"
    DRIVER_TIMEOUT = "DRIVER_002"
    DRIVER_FATAL = "DRIVER_003"
    DRIVER_UNAVAILABLE = "DRIVER_004"
    DRIVER_NAVIGATION_FAILED = "DRIVER_005"

    # Run Errors
    RUN_ABORTED = "RUN_001"

    # System Errors
    SYSTEM_INTERNAL_ERROR = "SYSTEM_001"


class WebFuzzError(Exception):
    """
    Base exception class for webfuzz with structured error information.

    Attributes:
        code: ErrorCode enum value (e.g., "CONFIG_001")
        message: Human-readable error message
        details: Optional dictionary with additional context
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize a WebFuzzError.

        Args:
            code: ErrorCode enum value
            message: Human-readable error message
            details: Optional dictionary with additional context
        """
        self.code = code
        self.message = message
        self.details = details or {}

        # Build exception message with code for easy debugging
        super().__init__(f"[{code.value}] {message}")


# ============================================================================
# Convenience Functions
# ============================================================================

def handle_error(error: Exception, context: Optional[str] = None) -> WebFuzzError:
    """
    Convert a generic exception to a WebFuzzError.

    Used by the CLI so that unexpected exceptions still produce a structured
    message and a stable exit code.

    Args:
        error: The original exception
        context: Optional context string (e.g., "while loading plugins")

    Returns:
        WebFuzzError with appropriate code and message
    """
    if isinstance(error, WebFuzzError):
        return error

    error_type = type(error).__name__
    if "Timeout" in error_type:
        code = ErrorCode.DRIVER_TIMEOUT
    elif isinstance(error, (FileNotFoundError, ValueError)):
        code = ErrorCode.CONFIG_INVALID
    else:
        code = ErrorCode.SYSTEM_INTERNAL_ERROR

    message = str(error) or error_type
    if context:
        message = f"{context}: {message}"

    return WebFuzzError(
        code=code,
        message=message,
        details={
            "original_type": error_type,
            "original_message": str(error),
        },
    )


# ============================================================================
# Module-Level Exports
# ============================================================================

__all__ = ["ErrorCode", "WebFuzzError", "handle_error"]
