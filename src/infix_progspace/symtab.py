"""Symbol tables for calculation trees.

Generated and parsed programs both go through build_symbol_table before they
are compared, so a reference to a name no earlier statement assigns is caught
in one place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from lark import Tree

from .tree import ASSIGN, CALCULATION, OUTPUT, iter_refs, tree_label


class SymbolTableError(Exception):
    """A calculation that cannot be given a consistent symbol table."""


@dataclass
class SymbolTable:
    defs: Dict[str, List[Tree]] = field(default_factory=dict)

    def define(self, name: str, stmt: Tree) -> None:
        self.defs.setdefault(name, []).append(stmt)

    def lookup(self, name: str) -> List[Tree]:
        return list(self.defs.get(name, ()))

    def __contains__(self, name: object) -> bool:
        return name in self.defs

    def names(self) -> List[str]:
        return sorted(self.defs)


def build_symbol_table(calculation: Tree) -> SymbolTable:
    """Rebuild name -> defining statements, checking every ref resolves."""
    if tree_label(calculation) != CALCULATION:
        raise SymbolTableError(f"expected a calculation, got {tree_label(calculation)!r}")

    table = SymbolTable()
    for stmt in calculation.children:
        label = tree_label(stmt)
        if label not in (ASSIGN, OUTPUT):
            raise SymbolTableError(f"unexpected statement {label!r} in calculation")

        target, value = stmt.children
        for name in iter_refs(value):
            if name not in table:
                raise SymbolTableError(f"undefined variable {name!r}")

        # assignments take effect after their own right-hand side
        if label == ASSIGN:
            table.define(str(target), stmt)

    return table
