"""
webfuzz/arbitraries
Seeded generators with shrink trees, plus the web-specific domain generators.
"""

from .core import (
    Arbitrary,
    booleans,
    bounded_collection,
    characters,
    constant,
    dictionaries,
    integers,
    one_of,
    record,
    sampled_from,
    text,
    tuples,
    unicode_text,
)
from .paths import (
    COMMON_PATHS,
    expand_paths,
    matches_any,
    matches_pattern,
    path_arbitrary,
    query_params_arbitrary,
)
from .seeds import derive_seed, fresh_seed, trial_rng
from .shrinkable import Shrinkable, measure
from .strings import ADVERSARIAL_CORPUS, malicious_string

__all__ = [
    "ADVERSARIAL_CORPUS",
    "Arbitrary",
    "COMMON_PATHS",
    "Shrinkable",
    "booleans",
    "bounded_collection",
    "characters",
    "constant",
    "derive_seed",
    "dictionaries",
    "expand_paths",
    "fresh_seed",
    "integers",
    "malicious_string",
    "matches_any",
    "matches_pattern",
    "measure",
    "one_of",
    "path_arbitrary",
    "query_params_arbitrary",
    "record",
    "sampled_from",
    "text",
    "trial_rng",
    "tuples",
    "unicode_text",
]
