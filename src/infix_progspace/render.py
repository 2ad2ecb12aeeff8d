"""
Ambiguity-aware rendering: every string a parser must accept for a tree.

The infix grammar admits several spellings per tree: redundant parentheses
around any operator, optional parentheses around multi-element tuples at
statement level, and an optional trailing comma on tuples and append(...) of
two or more elements. Each printer function returns a LazyStream of Render
values, so the exponential number of spellings of a deep tree is only built
as far as the consumer iterates.

Precedence ladder (higher binds tighter). Adding an operator must keep these
relative positions and the left-associative handling in wrap_group, or the
enumeration will silently produce too few or invalid spellings:

     0  tuple indexing  a . b
    -1  multiply, divide
    -2  add, subtract
    -3  tuple / append element lists
    -4  statement level (nothing bound yet)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, List, Tuple

from lark import Tree

from . import tree as ast
from .lazy import LazyStream
from .rope import Rope

IDX_PRECEDENCE = 0
MUL_PRECEDENCE = -1
ADD_PRECEDENCE = -2
LIST_PRECEDENCE = -3
STMT_PRECEDENCE = -4

BINOP_PRECEDENCE = {
    ast.TUPLE_IDX: IDX_PRECEDENCE,
    ast.MULTIPLY: MUL_PRECEDENCE,
    ast.DIVIDE: MUL_PRECEDENCE,
    ast.ADD: ADD_PRECEDENCE,
    ast.SUBTRACT: ADD_PRECEDENCE,
}


@dataclass(frozen=True)
class Render:
    """One spelling, plus whether it dropped parentheses around a tuple."""

    text: Rope
    tuple_parens_omitted: bool = False

    def parens_omitted(self) -> Render:
        return Render(self.text, True)

    def concat(self, other: Render) -> Render:
        return Render(
            self.text.concat(other.text),
            self.tuple_parens_omitted or other.tuple_parens_omitted,
        )

    def __str__(self) -> str:
        return str(self.text)


Renders = LazyStream[Render]


def lit(text: str) -> Renders:
    return LazyStream.single(Render(Rope(text)))


def cat(lhs: Renders, rhs: Renders) -> Renders:
    """Cartesian concatenation: every lhs spelling followed by every rhs one."""
    return lhs.flat_map(lambda prefix: rhs.map(prefix.concat))


def cat_all(parts: Iterable[Renders]) -> Renders:
    result = lit("")
    for part in parts:
        result = cat(result, part)
    return result


@dataclass(frozen=True)
class GroupPrecedence:
    """
    What may appear unparenthesized at the current position.

    curr_precedence: operators at a strictly higher level need no parens
    allow_assoc: an operator at exactly curr_precedence also needs none
                 (left operand of a left-associative chain)
    """

    curr_precedence: int = STMT_PRECEDENCE
    allow_assoc: bool = False

    def with_precedence(self, precedence: int) -> GroupPrecedence:
        return GroupPrecedence(precedence, self.allow_assoc)

    def with_assoc(self, allow_assoc: bool) -> GroupPrecedence:
        return GroupPrecedence(self.curr_precedence, allow_assoc)

    def accepts(self, precedence: int) -> bool:
        return precedence > self.curr_precedence or (
            precedence == self.curr_precedence and self.allow_assoc
        )

    def wrap_group(self, precedence: int, body: Callable[[], Renders]) -> Renders:
        """
        Bare spellings first (when this position accepts the level), then the
        parenthesized ones. body() renders the construct with its operands
        placed relative to its own level; the enclosing context does not reach
        inside the parentheses.
        """

        def grouped() -> Renders:
            return cat_all((lit("("), body(), lit(")")))

        if self.accepts(precedence):
            return body().concat(grouped)
        return grouped()


# ============================================================================
# Expressions
# ============================================================================

def _left_chain(node: Tree) -> Tuple[Tree, List[Tree]]:
    """
    Split a left-nested run of same-level operators, e.g. ((a + b) - c) + d,
    into its leftmost operand and the operator nodes, innermost first.
    """
    level = BINOP_PRECEDENCE[node.data]
    chain = [node]
    while True:
        lhs = chain[-1].children[0]
        inner = ast.expression_body(lhs)
        if BINOP_PRECEDENCE.get(ast.tree_label(inner)) != level:
            chain.reverse()
            return lhs, chain
        chain.append(inner)


def _binop_strings(precedence: GroupPrecedence, node: Tree) -> Renders:
    level = BINOP_PRECEDENCE[node.data]
    base, chain = _left_chain(node)
    operand = precedence.with_precedence(level)
    lhs_slot = operand.with_assoc(True)
    rhs_slot = operand.with_assoc(False)

    def body() -> Renders:
        # built bottom-up in a loop so long chains don't recurse per operator
        lhs = expression_strings(lhs_slot, base)
        spelled = lhs
        for idx, op_node in enumerate(chain):
            if idx:
                lhs = lhs_slot.wrap_group(level, lambda inner=spelled: inner)
            spelled = cat_all((
                lhs,
                lit(f" {ast.source_text(op_node)} "),
                expression_strings(rhs_slot, op_node.children[1]),
            ))
        return spelled

    return precedence.wrap_group(level, body)


def _comma_sep_children(precedence: GroupPrecedence, items: Tuple[Tree, ...]) -> Renders:
    """a, b, c with an optional trailing comma; mandatory for 0 or 1 items."""
    result = lit("")
    for idx, child in enumerate(items):
        if idx:
            result = cat(result, lit(", "))
        result = cat(result, expression_strings(precedence, child))

    if len(items) < 2:
        return cat(result, lit(","))

    return result.concat(lambda: cat(result, lit(",")))


def _tuple_strings(precedence: GroupPrecedence, node: Tree) -> Renders:
    items = tuple(node.children)
    element_precedence = GroupPrecedence(LIST_PRECEDENCE, False)

    # (), (a,) keep their parens so they don't read as a grouped expression
    if len(items) > 1 and precedence.accepts(LIST_PRECEDENCE):
        choices = LazyStream.of(True, False)
    else:
        choices = LazyStream.single(False)

    def spell(omit_parens: bool) -> Renders:
        inner = _comma_sep_children(element_precedence, items)
        if omit_parens:
            return inner.map(Render.parens_omitted)
        return cat_all((lit("("), inner, lit(")")))

    return choices.flat_map(spell)


def _append_strings(node: Tree) -> Renders:
    element_precedence = GroupPrecedence(LIST_PRECEDENCE, False)
    return cat_all((
        lit("append("),
        _comma_sep_children(element_precedence, tuple(node.children)),
        lit(")"),
    ))


def expression_strings(precedence: GroupPrecedence, expression: Tree) -> Renders:
    """Every spelling of an expression node at a position described by precedence."""
    if ast.tree_label(expression) != ast.EXPRESSION or len(expression.children) != 1:
        raise ValueError(f"expected an expression node, got {expression!r}")

    node = ast.expression_body(expression)

    if ast.is_token(node):
        return lit(str(node))

    label = node.data
    if label in BINOP_PRECEDENCE:
        return _binop_strings(precedence, node)
    if label == ast.TUPLE:
        return _tuple_strings(precedence, node)
    if label == ast.APPEND:
        return _append_strings(node)

    raise ValueError(f"no rendering for node type {label!r}")


# ============================================================================
# Statements
# ============================================================================

def assign_strings(assign: Tree) -> Renders:
    if ast.tree_label(assign) != ast.ASSIGN:
        raise ValueError(f"expected an assign node, got {ast.tree_label(assign)!r}")
    target, value = assign.children
    return cat_all((
        lit(str(target)),
        lit(" = "),
        expression_strings(GroupPrecedence(), value),
        lit(";"),
    ))


def output_strings(output: Tree) -> Renders:
    if ast.tree_label(output) != ast.OUTPUT:
        raise ValueError(f"expected an output node, got {ast.tree_label(output)!r}")
    label, value = output.children
    return cat_all((
        lit(f"print {label} "),
        expression_strings(GroupPrecedence(), value),
        lit(";"),
    ))


def statement_strings(stmt: Tree) -> Renders:
    if ast.tree_label(stmt) == ast.OUTPUT:
        return output_strings(stmt)
    return assign_strings(stmt)


def calculation_strings(calculation: Tree) -> Renders:
    """Every spelling of a whole program; statements are joined without separators."""
    if ast.tree_label(calculation) != ast.CALCULATION:
        raise ValueError(
            f"expected a calculation node, got {ast.tree_label(calculation)!r}"
        )
    return cat_all(statement_strings(stmt) for stmt in calculation.children)
