"""Reader: source text -> checked calculation tree."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from lark import Tree

from .config import Config
from .lexer_rd import LexError
from .parser_rd import ParseError, parse_source
from .symtab import SymbolTableError, build_symbol_table

logger = logging.getLogger(__name__)


@dataclass
class ParseResult:
    tree: Optional[Tree]
    ok: bool
    errors: List[str] = field(default_factory=list)


def parse(source: str, config: Optional[Config] = None) -> ParseResult:
    """
    Lex, parse and resolve names. Front-end errors come back as ok=False
    rather than exceptions, so callers can classify them.
    """
    config = config if config is not None else Config()
    try:
        tree = parse_source(source, config=config)
        build_symbol_table(tree)
    except (LexError, ParseError, SymbolTableError) as exc:
        logger.debug("rejected %r: %s", source, exc)
        return ParseResult(tree=None, ok=False, errors=[str(exc)])
    return ParseResult(tree=tree, ok=True)
