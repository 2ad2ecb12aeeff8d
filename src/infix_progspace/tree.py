"""Node vocabulary and helpers for infix ASTs.

Programs are plain lark Tree/Token values: Tree equality is structural (label
plus children) and Token equality compares type and text. Operator display
text rides along in Tree.meta, which equality ignores.
"""
from __future__ import annotations
from typing import Iterable, List, Optional, TypeGuard, Union
from typing_extensions import TypeAlias

from lark import Token, Tree

Node: TypeAlias = Union[Tree, Token]

# Node labels
CALCULATION = 'calculation'
ASSIGN = 'assign'
OUTPUT = 'output'
EXPRESSION = 'expression'
REF = 'ref'
ADD = 'add'
SUBTRACT = 'subtract'
MULTIPLY = 'multiply'
DIVIDE = 'divide'
TUPLE = 'tuple'
APPEND = 'append'
TUPLE_IDX = 'tuple_idx'

# Token types for leaves
INT = 'INT'
FLOAT = 'FLOAT'
STRING = 'STRING'
IDENT = 'IDENT'

ARITH_OPS = (ADD, SUBTRACT, MULTIPLY, DIVIDE)
BINARY_OPS = ARITH_OPS + (TUPLE_IDX,)
TUPLE_OPS = (TUPLE, APPEND, TUPLE_IDX)

OP_TEXT = {
    ADD: '+',
    SUBTRACT: '-',
    MULTIPLY: '*',
    DIVIDE: '/',
    TUPLE_IDX: '.',
}


def is_tree(node: object) -> TypeGuard[Tree]:
    return isinstance(node, Tree)

def is_token(node: object) -> TypeGuard[Token]:
    return isinstance(node, Token)

def tree_label(node: Node) -> Optional[str]:
    return node.data if is_tree(node) else None

def tree_children(node: Node) -> List[Node]:
    if not is_tree(node):
        return []
    return list(node.children)

def with_text(tree: Tree, text: str) -> Tree:
    """Attach display text to a node without affecting equality."""
    tree.meta.text = text
    return tree

def source_text(node: Node) -> str:
    """Literal source text for a leaf, or the display text of an operator."""
    if is_token(node):
        return str(node)
    text = getattr(node.meta, 'text', None)
    if text is None:
        raise ValueError(f"node {node.data!r} carries no source text")
    return text


# ============================================================================
# Constructors
# ============================================================================

def int_lit(text: str) -> Token:
    return Token(INT, text)

def float_lit(text: str) -> Token:
    return Token(FLOAT, text)

def string_lit(text: str) -> Token:
    return Token(STRING, text)

def ident(name: str) -> Token:
    return Token(IDENT, name)

def expression(body: Node) -> Tree:
    return Tree(EXPRESSION, [body])

def ref(name: str) -> Tree:
    return Tree(REF, [ident(name)])

def binop(label: str, lhs: Tree, rhs: Tree, text: Optional[str] = None) -> Tree:
    if label not in BINARY_OPS:
        raise ValueError(f"not a binary operator: {label!r}")
    return with_text(Tree(label, [lhs, rhs]), text if text is not None else OP_TEXT[label])

def tuple_lit(items: Iterable[Tree]) -> Tree:
    return Tree(TUPLE, list(items))

def append_lit(items: Iterable[Tree]) -> Tree:
    return Tree(APPEND, list(items))

def assign(name: Union[str, Token], value: Tree) -> Tree:
    target = name if is_token(name) else ident(name)
    return Tree(ASSIGN, [target, value])

def output(label: Union[str, Token], value: Tree) -> Tree:
    text = label if is_token(label) else string_lit(label)
    return Tree(OUTPUT, [text, value])

def calculation(statements: Iterable[Tree]) -> Tree:
    return Tree(CALCULATION, list(statements))


# ============================================================================
# Queries
# ============================================================================

def expression_body(expr: Node) -> Node:
    """Strip the expression wrapper and a ref wrapper, if present."""
    node = expr
    if tree_label(node) == EXPRESSION:
        if len(node.children) != 1:
            raise ValueError("expression node must have exactly one child")
        node = node.children[0]
    if tree_label(node) == REF:
        node = node.children[0]
    return node

def contains_tuple_ops(node: Node) -> bool:
    if tree_label(node) in TUPLE_OPS:
        return True
    return any(contains_tuple_ops(child) for child in tree_children(node))

def iter_refs(node: Node) -> Iterable[str]:
    """Names referenced anywhere below node, in left-to-right order."""
    if tree_label(node) == REF:
        yield str(node.children[0])
        return
    for child in tree_children(node):
        yield from iter_refs(child)
