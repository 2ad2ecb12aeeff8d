"""
Lazy, purely functional streams for program-space exploration.

A LazyStream is either empty or a cell holding one value plus a zero-argument
continuation that produces the rest of the stream. Continuations are NOT
memoized: asking for the tail twice runs the continuation twice, so everything
passed to map/flat_map/concat must be pure.

Combinatorial generators lean on two guarantees:
- concat never forces its right-hand side while the left still has elements
- flat_map only evaluates as much of its input as it needs to find the next
  live sub-stream
"""

from __future__ import annotations

from typing import Callable, Generic, Iterator, List, Optional, Tuple, TypeVar, Union

T = TypeVar("T")
U = TypeVar("U")

Thunk = Callable[[], "LazyStream[T]"]


def _empty_thunk() -> "LazyStream":
    return LazyStream()


class LazyStream(Generic[T]):
    """Deferred, possibly infinite sequence with a lazily evaluated tail."""

    __slots__ = ("_cell",)

    def __init__(self, cell: Optional[Tuple[T, Thunk]] = None):
        self._cell = cell

    # ========================================================================
    # Construction
    # ========================================================================

    @classmethod
    def empty(cls) -> LazyStream[T]:
        return cls()

    @classmethod
    def single(cls, value: T, next: Optional[Thunk] = None) -> LazyStream[T]:
        """One element, optionally followed by whatever next() yields."""
        return cls((value, next if next is not None else _empty_thunk))

    @classmethod
    def of(cls, *values: T) -> LazyStream[T]:
        def from_index(idx: int) -> LazyStream[T]:
            if idx >= len(values):
                return cls()
            return cls.single(values[idx], lambda: from_index(idx + 1))

        return from_index(0)

    # ========================================================================
    # Inspection
    # ========================================================================

    def is_nonempty(self) -> bool:
        return self._cell is not None

    __bool__ = is_nonempty

    @property
    def head(self) -> T:
        if self._cell is None:
            raise IndexError("head of empty LazyStream")
        return self._cell[0]

    def tail(self) -> LazyStream[T]:
        """Run the continuation. Not memoized; each call recomputes."""
        if self._cell is None:
            raise IndexError("tail of empty LazyStream")
        return self._cell[1]()

    def __iter__(self) -> Iterator[T]:
        current = self
        while current._cell is not None:
            value, next_fn = current._cell
            yield value
            current = next_fn()

    def take(self, n: int) -> List[T]:
        out: List[T] = []
        current = self
        while len(out) < n and current._cell is not None:
            value, next_fn = current._cell
            out.append(value)
            if len(out) < n:
                current = next_fn()
        return out

    def __repr__(self) -> str:
        if self._cell is None:
            return "LazyStream()"
        return f"LazyStream({self._cell[0]!r}, ...)"

    # ========================================================================
    # Combinators
    # ========================================================================

    def map(self, fn: Callable[[T], U]) -> LazyStream[U]:
        if self._cell is None:
            return LazyStream()
        value, next_fn = self._cell
        return LazyStream.single(fn(value), lambda: next_fn().map(fn))

    def concat(self, rhs: Union[LazyStream[T], Thunk]) -> LazyStream[T]:
        """
        Lazy append. When self is empty the right side is produced right away
        (called if it is a thunk); otherwise it is only touched once every
        element of self has been consumed.
        """
        if self._cell is None:
            return rhs() if callable(rhs) else rhs
        value, next_fn = self._cell
        return LazyStream.single(value, lambda: next_fn().concat(rhs))

    def flat_map(self, fn: Callable[[T], LazyStream[U]]) -> LazyStream[U]:
        """
        Order-preserving flatten of fn over every element.

        The scan for the first element whose sub-stream is non-empty is strict:
        dead elements are walked eagerly inside this call. Everything after the
        first produced element, including the rest of the input, is deferred.
        """
        current: LazyStream[T] = self
        while current._cell is not None:
            value, next_fn = current._cell
            result = fn(value)
            if result._cell is not None:
                return result.concat(lambda: next_fn().flat_map(fn))
            current = next_fn()
        return LazyStream()
