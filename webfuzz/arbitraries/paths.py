"""
webfuzz/arbitraries/paths.py

Purpose:
    Path and query-parameter generators scoped by include/exclude globs.

Glob semantics:
    - A pattern containing "**" matches any path that starts with the literal
      text before the first "**" (so "/b/**" matches "/b/x/y" but not "/b").
    - Otherwise a "*" matches a run of characters other than "/"; everything
      else in the pattern is literal and the match is anchored.
    - A pattern without wildcards requires exact equality.
"""

from __future__ import annotations

import json
import re
from functools import lru_cache
from typing import Dict, Iterable, List, Optional, Sequence

from .core import (
    Arbitrary,
    bounded_collection,
    booleans,
    constant,
    dictionaries,
    integers,
    one_of,
    sampled_from,
    text,
)
from .strings import plain_string

PATH_CHARS = "abcdefghijklmnopqrstuvwxyz0123456789-_"

COMMON_PATHS = (
    "/",
    "/index",
    "/home",
    "/about",
    "/contact",
    "/login",
    "/logout",
    "/register",
    "/signup",
    "/dashboard",
    "/profile",
    "/settings",
    "/admin",
    "/api",
    "/search",
    "/help",
    "/faq",
    "/privacy",
    "/terms",
    "/404",
    "/500",
)


@lru_cache(maxsize=256)
def _single_star_regex(pattern: str) -> re.Pattern:
    return re.compile("^" + "[^/]*".join(re.escape(part) for part in pattern.split("*")) + "$")


def matches_pattern(path: str, pattern: str) -> bool:
    if "**" in pattern:
        return path.startswith(pattern.split("**", 1)[0])
    if "*" in pattern:
        return _single_star_regex(pattern).match(path) is not None
    return path == pattern


def matches_any(path: str, patterns: Iterable[str]) -> bool:
    return any(matches_pattern(path, pattern) for pattern in patterns)


def expand_paths(patterns: Sequence[str]) -> List[str]:
    """Collapse each include pattern to the base path before its first wildcard."""
    expanded: List[str] = []
    for pattern in patterns:
        if "*" in pattern:
            base = re.sub(r"/?\*.*$", "", pattern) or "/"
        else:
            base = pattern
        if base not in expanded:
            expanded.append(base)
    return expanded


def path_segments() -> Arbitrary[str]:
    segment = text(PATH_CHARS, min_size=1, max_size=10)
    return bounded_collection(segment, min_size=1, max_size=5).map(lambda parts: "/" + "/".join(parts))


def path_arbitrary(include: Sequence[str], exclude: Sequence[str] = ()) -> Arbitrary[str]:
    """
    Configured include paths first (cheapest), then synthetic segment paths,
    then the common-path catalogue. Anything matching an exclude glob is
    rejected; if excludes cover every candidate the filter's retry budget
    turns that into a GeneratorExhaustedError.
    """
    expanded = expand_paths(include)
    configured = sampled_from(expanded) if expanded else constant("/")
    excluded = tuple(exclude)
    return one_of(
        configured,
        path_segments(),
        sampled_from(COMMON_PATHS),
    ).filter(lambda path: not matches_any(path, excluded))


def typed_value() -> Arbitrary[str]:
    """Strings that look like JSON scalars or small JSON documents."""
    scalar = one_of(
        integers(-1000, 1000),
        booleans(),
        constant(None),
        plain_string(10),
    )
    return one_of(
        scalar,
        bounded_collection(scalar, max_size=4),
        dictionaries(text(PATH_CHARS, min_size=1, max_size=8), scalar, max_size=3),
    ).map(json.dumps)


def param_value() -> Arbitrary[str]:
    return one_of(
        constant(""),
        constant("null"),
        constant("undefined"),
        constant("true"),
        constant("false"),
        integers().map(str),
        constant("<script>alert(1)</script>"),
        constant("' OR '1'='1"),
        plain_string(),
        typed_value(),
    )


def query_params_arbitrary(names: Optional[Sequence[str]] = None, max_size: int = 5) -> Arbitrary[Dict[str, str]]:
    """Random keys, or keys drawn from configured parameter names when given."""
    if names:
        keys = sampled_from(tuple(names))
    else:
        keys = text(PATH_CHARS, min_size=1, max_size=20)
    return dictionaries(keys, param_value(), max_size=max_size)
