# ============================================================================
# webfuzz/arbitraries/strings.py
# Adversarial String Corpus
# ============================================================================
#
# PURPOSE:
# A closed, enumerable library of hostile inputs for form fields and query
# parameters, unioned with plain random strings. Corpus members are emitted
# verbatim (never mutated), so any counterexample drawn from the corpus
# replays exactly from the same seed.
#
# PAYLOAD CATEGORIES:
# - **Markup injection**: <script>alert(1)</script>, event-handler attributes
# - **SQL injection**: ' OR '1'='1, stacked queries, UNION probes
# - **Path traversal**: ../../../etc/passwd and encoded variants
# - **Command injection**: ; ls -la, $(whoami)
# - **Control / unicode**: NUL bytes, RTL override, astral-plane characters
# - **Oversized**: 1 KB to 64 KB runs
# - **Numeric / boolean edges**: 9999999999999999999, NaN, null, undefined
#
# ============================================================================

from __future__ import annotations

from typing import Dict, Tuple

from .core import Arbitrary, constant, one_of, text, unicode_text

CORPUS: Dict[str, Tuple[str, ...]] = {
    "markup": (
        "<script>alert(1)</script>",
        '"><img src=x onerror=alert(1)>',
        "'-alert(1)-'",
        "<svg onload=alert(1)>",
        "javascript:alert(1)",
        '<iframe src="javascript:alert(1)">',
        '{{constructor.constructor("alert(1)")()}}',
        "<body onload=alert(1)>",
        "%7B%7B7*7%7D%7D",
    ),
    "sql": (
        "' OR '1'='1",
        "1; DROP TABLE users;--",
        "' UNION SELECT * FROM users--",
        "1' AND '1'='1",
        "admin'--",
        "'\"",
    ),
    "traversal": (
        "../../../etc/passwd",
        "..\\..\\..\\windows\\system32\\config\\sam",
        "%2e%2e%2f%2e%2e%2f",
    ),
    "command": (
        "; ls -la",
        "| cat /etc/passwd",
        "$(whoami)",
        "`id`",
        "() { :;}; echo vulnerable",
    ),
    "control": (
        "\x00\x01\x02",
        "\n\r\t",
        "\x00",
        "\ufffe\uffff",
    ),
    "unicode": (
        "\U00020bb7野家",
        "\U0001f389\U0001f38a\U0001f388",
        "\u202eABC",
        "\U00010000",
    ),
    "oversized": (
        "a" * 1000,
        "a" * 10000,
        "A" * 65536,
    ),
    "format": (
        "%s%s%s%s%s",
        "%n%n%n%n",
        "{0}{1}{2}",
    ),
    "structured": (
        '{"__proto__": {"admin": true}}',
        "]]><!--",
        '<?xml version="1.0"?><!DOCTYPE foo [<!ENTITY xxe SYSTEM "file:///etc/passwd">]>',
    ),
    "blank": (
        "",
        "   ",
        "\t\t\t",
    ),
    "numeric": (
        "0",
        "-1",
        "9999999999999999999",
        "1e308",
        "NaN",
        "Infinity",
    ),
    "boolean": (
        "true",
        "false",
        "null",
        "undefined",
    ),
}

ADVERSARIAL_CORPUS: Tuple[str, ...] = tuple(payload for group in CORPUS.values() for payload in group)


def malicious_string() -> Arbitrary[str]:
    """
    One branch per corpus member, then three random-string branches.
    Corpus branches come first so shrinking a random string that fails can
    swap to a fixed payload.
    """
    return one_of(
        *(constant(payload) for payload in ADVERSARIAL_CORPUS),
        text(),
        unicode_text(),
        text(min_size=100, max_size=500),
    )


def plain_string(max_size: int = 20) -> Arbitrary[str]:
    return text(max_size=max_size)
