from .base import Check, CheckSession, Outcome, TrialSignals
from .inputs import FORM_FUZZING, QUERY_PARAM_FUZZING
from .interaction import RAPID_CLICK, ClickTarget, click_targets
from .navigation import HISTORY_NAVIGATION, NO_SERVER_ERROR, RELOAD_STATE_RESTORE
from .registry import BUILTIN_CHECKS, CheckRegistry, validate_check

__all__ = [
    "BUILTIN_CHECKS",
    "Check",
    "CheckRegistry",
    "CheckSession",
    "ClickTarget",
    "FORM_FUZZING",
    "HISTORY_NAVIGATION",
    "NO_SERVER_ERROR",
    "Outcome",
    "QUERY_PARAM_FUZZING",
    "RAPID_CLICK",
    "RELOAD_STATE_RESTORE",
    "TrialSignals",
    "click_targets",
    "validate_check",
]
