"""Immutable concatenation trees for building rendered program text."""

from __future__ import annotations

import io
from typing import Iterator, List, Optional, Protocol


class TextSink(Protocol):
    def write(self, text: str) -> object: ...


class Rope:
    """
    Either a text fragment or a concat node over two ropes.

    Concatenation only links nodes; nothing is copied until the rope is
    materialized. Nodes are never mutated after construction, so sub-ropes can
    be shared freely between renderings.
    """

    __slots__ = ("_text", "_left", "_right")

    def __init__(self, text: str = ""):
        self._text: Optional[str] = text
        self._left: Optional[Rope] = None
        self._right: Optional[Rope] = None

    @classmethod
    def join(cls, left: Rope, right: Rope) -> Rope:
        node = cls.__new__(cls)
        node._text = None
        node._left = left
        node._right = right
        return node

    def concat(self, other: Rope | str) -> Rope:
        if isinstance(other, str):
            other = Rope(other)
        return Rope.join(self, other)

    __add__ = concat

    @property
    def is_leaf(self) -> bool:
        return self._text is not None

    def leaves(self) -> Iterator[str]:
        """Yield leaf fragments left to right using an explicit work stack."""
        stack: List[Rope] = [self]
        while stack:
            node = stack.pop()
            if node._text is not None:
                yield node._text
            else:
                # right first so the left subtree is emitted first
                stack.append(node._right)
                stack.append(node._left)

    def write_to(self, sink: TextSink) -> None:
        for fragment in self.leaves():
            sink.write(fragment)

    def __str__(self) -> str:
        out = io.StringIO()
        self.write_to(out)
        return out.getvalue()

    def __repr__(self) -> str:
        return f"Rope({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Rope):
            return str(self) == str(other)
        if isinstance(other, str):
            return str(self) == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(str(self))
