"""
webfuzz/arbitraries/core.py

Purpose:
    The composition algebra for randomized inputs. An Arbitrary draws a
    Shrinkable from a seeded random.Random; combinators build larger
    generators out of smaller ones.

Determinism:
    - draw() consumes randomness only from the rng it is given. No module
      state, no time, no os.urandom.
    - Shrink trees are pure functions of the drawn nodes; one_of stores a
      swap seed at draw time so branch swaps replay exactly.
"""

from __future__ import annotations

import random
import string
from abc import ABC, abstractmethod
from typing import (
    Any,
    Callable,
    Dict,
    Generic,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    TypeVar,
    Union,
)

from webfuzz.base.exceptions import ConfigurationError, GeneratorExhaustedError

from .shrinkable import Shrinkable, integer_node, sequence_node

T = TypeVar("T")
U = TypeVar("U")

# Rejection sampling budget for filter(); exhaustion is a configuration error.
DEFAULT_FILTER_ATTEMPTS = 100

PRINTABLE = "".join(ch for ch in string.printable if ch not in "\x0b\x0c")


class Arbitrary(ABC, Generic[T]):
    """
    A seed-deterministic generator of values of type T with a shrink relation.
    """

    @abstractmethod
    def draw(self, rng: random.Random) -> Shrinkable[T]:
        """Produce one value (wrapped in its shrink tree) from rng."""

    def map(self, fn: Callable[[T], U]) -> "Arbitrary[U]":
        return MappedArbitrary(self, fn)

    def filter(self, predicate: Callable[[T], bool], max_attempts: int = DEFAULT_FILTER_ATTEMPTS) -> "Arbitrary[T]":
        return FilteredArbitrary(self, predicate, max_attempts)

    def example(self, seed: int = 0) -> T:
        return self.draw(random.Random(seed)).value


class ConstantArbitrary(Arbitrary[T]):
    def __init__(self, value: T):
        self.value = value

    def draw(self, rng: random.Random) -> Shrinkable[T]:
        return Shrinkable(self.value)

    def __repr__(self) -> str:
        return f"constant({self.value!r:.40})"


class IntegerArbitrary(Arbitrary[int]):
    def __init__(self, min_value: int, max_value: int):
        if min_value > max_value:
            raise ConfigurationError(f"integers(): min_value {min_value} > max_value {max_value}")
        self.min_value = min_value
        self.max_value = max_value

    @property
    def target(self) -> int:
        # Shrink toward zero, clamped into the range.
        return min(max(0, self.min_value), self.max_value)

    def draw(self, rng: random.Random) -> Shrinkable[int]:
        return integer_node(rng.randint(self.min_value, self.max_value), self.target)

    def __repr__(self) -> str:
        return f"integers({self.min_value}, {self.max_value})"


class MappedArbitrary(Arbitrary[U]):
    def __init__(self, source: Arbitrary[T], fn: Callable[[T], U]):
        self.source = source
        self.fn = fn

    def draw(self, rng: random.Random) -> Shrinkable[U]:
        return self.source.draw(rng).map(self.fn)


class FilteredArbitrary(Arbitrary[T]):
    def __init__(self, source: Arbitrary[T], predicate: Callable[[T], bool], max_attempts: int):
        if max_attempts < 1:
            raise ConfigurationError("filter(): max_attempts must be at least 1")
        self.source = source
        self.predicate = predicate
        self.max_attempts = max_attempts

    def draw(self, rng: random.Random) -> Shrinkable[T]:
        for _ in range(self.max_attempts):
            node = self.source.draw(rng)
            if self.predicate(node.value):
                return node.filter(self.predicate)
        raise GeneratorExhaustedError(
            f"Generator too constrained: {self.source!r} rejected {self.max_attempts} consecutive candidates",
            attempts=self.max_attempts,
        )


class OneOfArbitrary(Arbitrary[Any]):
    """
    Weighted choice among branches. Earlier branches count as cheaper: when a
    value from branch i fails, shrinking first tries values from branches
    0..i-1, then the chosen branch's own candidates.
    """

    def __init__(self, branches: Sequence[Tuple[float, Arbitrary[Any]]]):
        if not branches:
            raise ConfigurationError("one_of() needs at least one branch")
        if any(weight <= 0 for weight, _ in branches):
            raise ConfigurationError("one_of() weights must be positive")
        self.branches = list(branches)
        self.total_weight = float(sum(weight for weight, _ in branches))

    def _pick(self, rng: random.Random) -> int:
        point = rng.random() * self.total_weight
        cumulative = 0.0
        for index, (weight, _) in enumerate(self.branches):
            cumulative += weight
            if point < cumulative:
                return index
        return len(self.branches) - 1

    def draw(self, rng: random.Random) -> Shrinkable[Any]:
        index = self._pick(rng)
        swap_seed = rng.getrandbits(32)
        return self._node(index, self.branches[index][1].draw(rng), swap_seed)

    def _node(self, index: int, inner: Shrinkable[Any], swap_seed: int) -> Shrinkable[Any]:
        def children() -> Iterable[Shrinkable[Any]]:
            for cheaper in range(index):
                swapped = self.branches[cheaper][1].draw(random.Random(swap_seed + cheaper))
                yield self._node(cheaper, swapped, swap_seed)
            for child in inner.shrink():
                yield self._node(index, child, swap_seed)

        return Shrinkable(inner.value, children)

    def __repr__(self) -> str:
        return f"one_of({len(self.branches)} branches)"


class BoundedCollectionArbitrary(Arbitrary[List[Any]]):
    def __init__(self, element: Arbitrary[Any], min_size: int = 0, max_size: int = 10):
        if min_size < 0 or max_size < min_size:
            raise ConfigurationError(f"bounded_collection(): invalid size range [{min_size}, {max_size}]")
        self.element = element
        self.min_size = min_size
        self.max_size = max_size

    def draw(self, rng: random.Random) -> Shrinkable[List[Any]]:
        length = rng.randint(self.min_size, self.max_size)
        items = tuple(self.element.draw(rng) for _ in range(length))
        return sequence_node(items, self.min_size)

    def __repr__(self) -> str:
        return f"bounded_collection({self.element!r}, {self.min_size}, {self.max_size})"


class TupleArbitrary(Arbitrary[Tuple[Any, ...]]):
    def __init__(self, elements: Sequence[Arbitrary[Any]]):
        self.elements = list(elements)

    def draw(self, rng: random.Random) -> Shrinkable[Tuple[Any, ...]]:
        items = tuple(element.draw(rng) for element in self.elements)
        # min_size == len(items): only component-wise shrinking applies
        return sequence_node(items, len(items), tuple)


class RecordArbitrary(Arbitrary[Dict[str, Any]]):
    """
    Mapping of names to sub-arbitraries. The key set is fixed here; keys
    outside `required` are optional and may be absent from a sample.
    """

    def __init__(self, fields: Mapping[str, Arbitrary[Any]], required: Optional[Iterable[str]] = None):
        self.fields = dict(fields)
        self.keys = tuple(self.fields)
        self.required = frozenset(self.keys if required is None else required)
        unknown = self.required - set(self.keys)
        if unknown:
            raise ConfigurationError(f"record(): required keys not in fields: {sorted(unknown)}")

    def draw(self, rng: random.Random) -> Shrinkable[Dict[str, Any]]:
        entries = []
        for key in self.keys:
            if key in self.required or rng.random() < 0.5:
                entries.append((key, self.fields[key].draw(rng)))
        return self._node(tuple(entries))

    def _node(self, entries: Tuple[Tuple[str, Shrinkable[Any]], ...]) -> Shrinkable[Dict[str, Any]]:
        def children() -> Iterable[Shrinkable[Dict[str, Any]]]:
            for index, (key, _) in enumerate(entries):
                if key not in self.required:
                    yield self._node(entries[:index] + entries[index + 1:])
            for index, (key, node) in enumerate(entries):
                for smaller in node.shrink():
                    yield self._node(entries[:index] + ((key, smaller),) + entries[index + 1:])

        return Shrinkable({key: node.value for key, node in entries}, children)

    def __repr__(self) -> str:
        return f"record({list(self.keys)})"


# ============================================================================
# Factory functions
# ============================================================================

Branch = Union[Arbitrary[Any], Tuple[float, Arbitrary[Any]]]


def constant(value: T) -> Arbitrary[T]:
    return ConstantArbitrary(value)


def one_of(*branches: Branch) -> Arbitrary[Any]:
    """Branches are arbitraries (weight 1) or (weight, arbitrary) pairs."""
    weighted = []
    for branch in branches:
        if isinstance(branch, Arbitrary):
            weighted.append((1.0, branch))
        else:
            weight, arbitrary = branch
            weighted.append((float(weight), arbitrary))
    return OneOfArbitrary(weighted)


def integers(min_value: int = -(2 ** 31), max_value: int = 2 ** 31 - 1) -> Arbitrary[int]:
    return IntegerArbitrary(min_value, max_value)


def sampled_from(values: Sequence[T]) -> Arbitrary[T]:
    """Uniform pick from a fixed sequence; shrinks toward earlier elements."""
    options = tuple(values)
    if not options:
        raise ConfigurationError("sampled_from() needs at least one value")
    return integers(0, len(options) - 1).map(lambda index: options[index])


def booleans() -> Arbitrary[bool]:
    return sampled_from((False, True))


def bounded_collection(element: Arbitrary[T], min_size: int = 0, max_size: int = 10) -> Arbitrary[List[T]]:
    return BoundedCollectionArbitrary(element, min_size, max_size)


def tuples(*elements: Arbitrary[Any]) -> Arbitrary[Tuple[Any, ...]]:
    return TupleArbitrary(elements)


def record(fields: Mapping[str, Arbitrary[Any]], required: Optional[Iterable[str]] = None) -> Arbitrary[Dict[str, Any]]:
    return RecordArbitrary(fields, required)


def text(alphabet: str = PRINTABLE, min_size: int = 0, max_size: int = 20) -> Arbitrary[str]:
    if not alphabet:
        raise ConfigurationError("text() needs a non-empty alphabet")
    return bounded_collection(sampled_from(alphabet), min_size, max_size).map("".join)


def characters(min_codepoint: int = 0x20, max_codepoint: int = 0x2FFF) -> Arbitrary[str]:
    """Single characters from a code point range, skipping surrogates."""
    return integers(min_codepoint, max_codepoint).filter(lambda cp: not 0xD800 <= cp <= 0xDFFF).map(chr)


def unicode_text(min_size: int = 0, max_size: int = 20) -> Arbitrary[str]:
    return bounded_collection(characters(), min_size, max_size).map("".join)


def dictionaries(
    keys: Arbitrary[Any],
    values: Arbitrary[Any],
    min_size: int = 0,
    max_size: int = 5,
) -> Arbitrary[Dict[Any, Any]]:
    """Duplicate keys collapse (last wins), so a sample may hold fewer than min_size entries."""
    return bounded_collection(tuples(keys, values), min_size, max_size).map(dict)


__all__ = [
    "Arbitrary",
    "DEFAULT_FILTER_ATTEMPTS",
    "PRINTABLE",
    "booleans",
    "bounded_collection",
    "characters",
    "constant",
    "dictionaries",
    "integers",
    "one_of",
    "record",
    "sampled_from",
    "text",
    "tuples",
    "unicode_text",
]
