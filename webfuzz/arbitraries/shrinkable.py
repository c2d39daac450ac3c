"""
webfuzz/arbitraries/shrinkable.py

Purpose:
    The shrink tree. Every drawn value is wrapped in a Shrinkable node whose
    children are lazily computed "smaller" variants. The runner walks this
    tree to find a minimal counterexample.

Invariants:
    - Nodes are immutable and children are recomputed on demand, so walking
      the same node twice yields the same candidates in the same order.
    - A node never lists itself among its children.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Iterable, Iterator, Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")
U = TypeVar("U")


def _no_children() -> Iterable[Any]:
    return ()


@dataclass(frozen=True)
class Shrinkable(Generic[T]):
    value: T
    children: Callable[[], Iterable["Shrinkable[T]"]] = field(default=_no_children, repr=False, compare=False)

    def shrink(self) -> Iterator["Shrinkable[T]"]:
        return iter(self.children())

    def map(self, fn: Callable[[T], U]) -> "Shrinkable[U]":
        return Shrinkable(fn(self.value), lambda: (child.map(fn) for child in self.shrink()))

    def filter(self, predicate: Callable[[T], bool]) -> "Shrinkable[T]":
        return Shrinkable(
            self.value,
            lambda: (child.filter(predicate) for child in self.shrink() if predicate(child.value)),
        )


def measure(value: Any) -> int:
    """
    Size metric for counterexamples. The runner never adopts a shrink
    candidate whose measure exceeds the current counterexample's.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (str, bytes)):
        return len(value)
    if isinstance(value, int):
        return abs(value)
    if isinstance(value, float):
        return int(abs(value)) if value == value and abs(value) != float("inf") else 0
    if isinstance(value, dict):
        return len(value) + sum(measure(v) for v in value.values())
    if isinstance(value, (list, tuple, set, frozenset)):
        return len(value) + sum(measure(v) for v in value)
    return 0


# ============================================================================
# Sequence shrinking
# ============================================================================

def shrink_sequence(
    items: Tuple[Shrinkable[Any], ...],
    min_size: int = 0,
) -> Iterator[Tuple[Shrinkable[Any], ...]]:
    """
    Candidates for a sequence of nodes: first remove chunks (largest first,
    never dropping below min_size), then shrink each element in place.
    """
    n = len(items)
    chunk = n - min_size
    while chunk > 0:
        for start in range(0, n - chunk + 1, chunk):
            yield items[:start] + items[start + chunk:]
        chunk //= 2
    for index, item in enumerate(items):
        for smaller in item.shrink():
            yield items[:index] + (smaller,) + items[index + 1:]


def sequence_node(
    items: Tuple[Shrinkable[Any], ...],
    min_size: int = 0,
    build: Optional[Callable[[Sequence[Any]], Any]] = None,
) -> Shrinkable[Any]:
    """Wrap element nodes into a collection node with list values by default."""
    builder = build or list
    return Shrinkable(
        builder([item.value for item in items]),
        lambda: (sequence_node(candidate, min_size, builder) for candidate in shrink_sequence(items, min_size)),
    )


def shrink_integer(value: int, target: int) -> Iterator[int]:
    """Halve the distance to target; every candidate is strictly closer."""
    if value == target:
        return
    yield target
    distance = (value - target) // 2 if value > target else -((target - value) // 2)
    while distance != 0:
        candidate = value - distance
        if candidate != target:
            yield candidate
        distance = int(distance / 2)


def integer_node(value: int, target: int) -> Shrinkable[int]:
    return Shrinkable(value, lambda: (integer_node(c, target) for c in shrink_integer(value, target)))
