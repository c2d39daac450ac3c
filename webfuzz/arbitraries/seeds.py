"""
webfuzz/arbitraries/seeds.py
Seed derivation for reproducible trials.

A trial's randomness is a pure function of (run seed, check name, trial index).
SHA-256 is used instead of hash() so the derivation is identical across
processes, interpreters and platforms (PYTHONHASHSEED does not apply).
"""

from __future__ import annotations

import hashlib
import random
import secrets

# Run seeds stay within 31 bits so they are easy to copy from a report.
SEED_BITS = 31


def derive_seed(seed: int, check_name: str, trial_index: int) -> int:
    digest = hashlib.sha256(f"{seed}:{check_name}:{trial_index}".encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big")


def trial_rng(seed: int, check_name: str, trial_index: int) -> random.Random:
    return random.Random(derive_seed(seed, check_name, trial_index))


def fresh_seed() -> int:
    return secrets.randbits(SEED_BITS)
