from __future__ import annotations

from typing import List

import pytest

from infix_progspace.lazy import LazyStream


def _boom() -> LazyStream[int]:
    raise AssertionError("right-hand side must not be forced")


def _counting_range(n: int, calls: List[int]) -> LazyStream[int]:
    def from_index(idx: int) -> LazyStream[int]:
        calls.append(idx)
        if idx >= n:
            return LazyStream.empty()
        return LazyStream.single(idx, lambda: from_index(idx + 1))

    return from_index(0)


def test_empty_has_no_elements() -> None:
    stream: LazyStream[int] = LazyStream.empty()
    assert not stream.is_nonempty()
    assert not stream
    assert list(stream) == []


def test_empty_head_and_tail_raise() -> None:
    stream: LazyStream[int] = LazyStream.empty()
    with pytest.raises(IndexError):
        _ = stream.head
    with pytest.raises(IndexError):
        stream.tail()


def test_single_has_one_element() -> None:
    stream = LazyStream.single(7)
    assert stream.is_nonempty()
    assert stream.head == 7
    assert not stream.tail()
    assert list(stream) == [7]


def test_single_with_next_defers_tail() -> None:
    stream = LazyStream.single(1, _boom)
    assert stream.head == 1
    with pytest.raises(AssertionError):
        stream.tail()


def test_of_preserves_order() -> None:
    assert list(LazyStream.of(3, 1, 2)) == [3, 1, 2]


def test_take_stops_early() -> None:
    stream = LazyStream.single(1, lambda: LazyStream.single(2, _boom))
    assert stream.take(2) == [1, 2]
    assert stream.take(0) == []


def test_tail_is_not_memoized() -> None:
    calls: List[int] = []
    stream = _counting_range(3, calls)
    assert calls == [0]

    stream.tail()
    stream.tail()
    assert calls == [0, 1, 1]


def test_iteration_restarts_from_same_value() -> None:
    stream = LazyStream.of(1, 2, 3)
    assert list(stream) == [1, 2, 3]
    assert list(stream) == [1, 2, 3]


def test_map_composes() -> None:
    stream = LazyStream.of(1, 2, 3)
    f = lambda x: x + 1
    g = lambda x: x * 10

    assert list(stream.map(f).map(g)) == list(stream.map(lambda x: g(f(x))))


def test_map_defers_tail() -> None:
    mapped = LazyStream.single(1, _boom).map(lambda x: x * 2)
    assert mapped.head == 2


def test_concat_empty_left_is_identity() -> None:
    stream = LazyStream.of(1, 2)
    assert list(LazyStream.empty().concat(stream)) == [1, 2]
    assert list(LazyStream.empty().concat(lambda: stream)) == [1, 2]


def test_concat_empty_right_is_identity() -> None:
    assert list(LazyStream.of(1, 2).concat(LazyStream.empty())) == [1, 2]


def test_concat_is_associative() -> None:
    a = LazyStream.of(1, 2)
    b = LazyStream.of(3)
    c = LazyStream.of(4, 5)

    left = a.concat(b).concat(c)
    right = a.concat(b.concat(c))
    assert list(left) == list(right) == [1, 2, 3, 4, 5]


def test_concat_does_not_force_rhs_while_lhs_has_elements() -> None:
    stream = LazyStream.of(1, 2).concat(_boom)
    assert stream.head == 1
    assert stream.tail().head == 2


def test_concat_forces_rhs_thunk_when_lhs_empty() -> None:
    forced: List[bool] = []

    def rhs() -> LazyStream[int]:
        forced.append(True)
        return LazyStream.single(9)

    stream = LazyStream.empty().concat(rhs)
    assert forced == [True]
    assert stream.head == 9


def test_flat_map_left_identity() -> None:
    f = lambda x: LazyStream.of(x, x + 1)
    assert list(LazyStream.single(4).flat_map(f)) == list(f(4))


def test_flat_map_right_identity() -> None:
    stream = LazyStream.of(1, 2, 3)
    assert list(stream.flat_map(LazyStream.single)) == [1, 2, 3]


def test_flat_map_preserves_outer_then_inner_order() -> None:
    stream = LazyStream.of(1, 2).flat_map(lambda x: LazyStream.of(x * 10, x * 10 + 1))
    assert list(stream) == [10, 11, 20, 21]


def test_flat_map_skips_dead_elements() -> None:
    stream = LazyStream.of(1, 2, 3, 4).flat_map(
        lambda x: LazyStream.single(x) if x % 2 == 0 else LazyStream.empty()
    )
    assert list(stream) == [2, 4]


def test_flat_map_all_dead_is_empty() -> None:
    stream = LazyStream.of(1, 2, 3).flat_map(lambda x: LazyStream.empty())
    assert not stream


def test_flat_map_only_scans_to_first_live_element() -> None:
    calls: List[int] = []
    source = _counting_range(100, calls)

    stream = source.flat_map(
        lambda x: LazyStream.single(x) if x >= 2 else LazyStream.empty()
    )
    assert stream.head == 2
    # elements 0..2 visited; the input after 2 is left alone
    assert calls == [0, 1, 2]

    assert stream.tail().take(2) == [3, 4]
    assert calls == [0, 1, 2, 3, 4]


def test_flat_map_over_infinite_stream_is_lazy() -> None:
    def naturals(n: int) -> LazyStream[int]:
        return LazyStream.single(n, lambda: naturals(n + 1))

    squares = naturals(0).flat_map(lambda x: LazyStream.single(x * x))
    assert squares.take(5) == [0, 1, 4, 9, 16]


def test_long_stream_iterates_without_recursion_limit() -> None:
    stream = LazyStream.of(*range(20000))
    assert sum(1 for _ in stream) == 20000
