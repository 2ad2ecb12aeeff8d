"""
Breadth-first program space for the infix language.

Every generator here returns a LazyStream, so enumerating depth-2 programs
(roughly a hundred thousand per statement) only builds as many trees as the
consumer pulls. All functions are pure; streams may be re-walked freely.
"""

from __future__ import annotations

from typing import AbstractSet, FrozenSet, Tuple

from lark import Tree

from . import tree as ast
from .lazy import LazyStream

# Assignment targets, consumed in order by valid_calculation
VALID_NAMES = ("foo", "bar", "ping", "bnorg")

Env = FrozenSet[str]


def valid_expression(env: AbstractSet[str], depth: int) -> LazyStream[Tree]:
    """Every expression of exactly the given nesting depth over env."""
    if depth < 0:
        raise ValueError(f"depth must be >= 0, got {depth}")

    if depth == 0:
        names = sorted(env)
        return (
            LazyStream.single(ast.expression(ast.int_lit("0")))
            .concat(lambda: LazyStream.single(ast.expression(ast.int_lit("1"))))
            .concat(lambda: LazyStream.of(*(ast.expression(ast.ref(name)) for name in names)))
            .concat(lambda: LazyStream.single(ast.expression(ast.tuple_lit([]))))
            .concat(lambda: LazyStream.single(ast.expression(ast.append_lit([]))))
        )

    sub_expr = valid_expression(env, depth - 1)

    def with_rhs(lhs: Tree, rhs: Tree) -> LazyStream[Tree]:
        return LazyStream.of(
            ast.expression(ast.binop(ast.ADD, lhs, rhs)),
            ast.expression(ast.binop(ast.SUBTRACT, lhs, rhs)),
            ast.expression(ast.binop(ast.MULTIPLY, lhs, rhs)),
            ast.expression(ast.binop(ast.DIVIDE, lhs, rhs)),
            ast.expression(ast.tuple_lit([lhs, rhs])),
            ast.expression(ast.append_lit([lhs, rhs])),
            ast.expression(ast.binop(ast.TUPLE_IDX, lhs, rhs)),
        )

    def with_lhs(lhs: Tree) -> LazyStream[Tree]:
        return (
            LazyStream.single(ast.expression(ast.tuple_lit([lhs])))
            .concat(lambda: LazyStream.single(ast.expression(ast.append_lit([lhs]))))
            .concat(lambda: sub_expr.flat_map(lambda rhs: with_rhs(lhs, rhs)))
        )

    return sub_expr.flat_map(with_lhs)


def valid_assignment(env: AbstractSet[str], name: str, depth: int) -> LazyStream[Tree]:
    return valid_expression(env, depth).map(lambda value: ast.assign(name, value))


def valid_calculation(op_count: int, depth: int) -> LazyStream[Tree]:
    """
    Every program of op_count assignments whose values all have the given
    depth. Statement i may reference the names assigned by statements 0..i-1.
    """
    if op_count < 0:
        raise ValueError(f"op_count must be >= 0, got {op_count}")
    if op_count > len(VALID_NAMES):
        raise ValueError(
            f"op_count {op_count} exceeds the {len(VALID_NAMES)} available names"
        )

    Partial = Tuple[Tuple[Tree, ...], Env]
    assigns: LazyStream[Partial] = LazyStream.single(((), frozenset()))

    for name in VALID_NAMES[:op_count]:
        def extend(partial: Partial, name: str = name) -> LazyStream[Partial]:
            stmts, env = partial
            return valid_assignment(env, name, depth).map(
                lambda stmt: (stmts + (stmt,), env | {name})
            )

        assigns = assigns.flat_map(extend)

    return assigns.map(lambda partial: ast.calculation(partial[0]))
