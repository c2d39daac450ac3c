from .runner import PropertyRunner
from .session import resolve_seed, run_checks, run_session

__all__ = [
    "PropertyRunner",
    "resolve_seed",
    "run_checks",
    "run_session",
]
