"""
Round-trip harness: generate -> render -> re-parse -> compare.

For every program the generator produces (up to a depth limit), every
spelling the ambiguity printer offers is fed back through the reader and the
result is compared to the original tree. The canonical writer's output is
checked too, so the printer and the writer cannot drift apart.

The harness is fail-fast: the first inconsistency raises a RoundTripError
carrying a human-readable report, and nothing after it is tried.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from lark import Tree

from .config import Config, ConfigError
from .lazy import LazyStream
from .progspace import VALID_NAMES, valid_calculation
from .reader import ParseResult, parse
from .render import Render, calculation_strings
from .rope import Rope
from .symtab import SymbolTableError, build_symbol_table
from .tree import contains_tuple_ops
from .writers import write_infix

logger = logging.getLogger(__name__)

ParseFn = Callable[[str, Config], ParseResult]


class RoundTripError(Exception):
    """A counterexample. report holds the full text shown to the user."""

    def __init__(self, message: str, report: str):
        self.report = report
        super().__init__(message)


class UnexpectedParseFailure(RoundTripError):
    """The reader rejected a spelling it should accept."""


class UnexpectedParseSuccess(RoundTripError):
    """The reader accepted, and parsed correctly, a spelling the config forbids."""


class ReparseMismatch(RoundTripError):
    """A spelling parsed back to a different tree."""


class RebuildError(RoundTripError):
    """A generated program could not be given a symbol table."""


# ============================================================================
# Reporting
# ============================================================================

def split_lines(text: str) -> List[str]:
    return text.splitlines()


def diffy_print(expected: str, actual: str) -> str:
    """
    Line-by-line view of actual against expected: '  ' same line, '! '
    changed line, '+ ' surplus line (at most four, then '...').
    """
    expected_lines = split_lines(expected)
    out: List[str] = []

    for pos, actual_line in enumerate(split_lines(actual)):
        if pos < len(expected_lines):
            marker = "  " if actual_line == expected_lines[pos] else "! "
            out.append(marker + actual_line)
        elif pos - len(expected_lines) > 3:
            out.append("...")
            break
        else:
            out.append("+ " + actual_line)

    return "\n".join(out)


def tree_text(tree: Tree) -> str:
    return tree.pretty()


# ============================================================================
# Checking
# ============================================================================

def program_renderings(program: Tree) -> LazyStream[Render]:
    """Every ambiguity spelling, then the canonical writer's spelling."""
    return calculation_strings(program).concat(
        lambda: LazyStream.single(Render(Rope(write_infix(program))))
    )


def expects_failure(config: Config, program: Tree, render: Render) -> bool:
    if not config.enable_tuples and contains_tuple_ops(program):
        return True
    if config.tuples_require_parens and render.tuple_parens_omitted:
        return True
    return False


def check_rendering(
    program: Tree,
    render: Render,
    config: Config,
    parse_fn: ParseFn = parse,
) -> bool:
    """
    Re-parse one spelling and compare. Returns whether the reader accepted it;
    raises a RoundTripError on any outcome the config does not explain.
    """
    rendered = str(render)
    prog_str = tree_text(program)
    expect_failure = expects_failure(config, program, render)
    result = parse_fn(rendered, config)

    if not result.ok:
        if expect_failure:
            return False
        errors = "\n".join(result.errors)
        report = "\n".join([
            "Error reparsing this AST:",
            prog_str.rstrip("\n"),
            "Based on this string:",
            rendered,
            "Reader errors:",
            errors,
        ])
        raise UnexpectedParseFailure("unexpected parse failure", report)

    result_str = tree_text(result.tree)

    if expect_failure:
        # a mis-parse is the expected outcome of a config mismatch; only a
        # perfect reparse is wrong here
        if result.tree == program:
            report = "\n".join([
                "Should have had error reparsing this AST:",
                prog_str.rstrip("\n"),
                "Based on this string:",
                rendered,
                "What we reparsed (diffy view):",
                diffy_print(prog_str, result_str),
            ])
            raise UnexpectedParseSuccess("unexpected parse success", report)
        return True

    if result.tree != program or result_str != prog_str:
        report = "\n".join([
            "Didn't reparse the same AST.",
            "What we generated:",
            prog_str.rstrip("\n"),
            "----",
            "What we rendered:",
            rendered,
            "----",
            "What we reparsed (diffy view):",
            diffy_print(prog_str, result_str),
        ])
        raise ReparseMismatch("reparsed tree differs", report)

    return True


# ============================================================================
# Driver
# ============================================================================

@dataclass(frozen=True)
class RoundTripSummary:
    ok_count: int
    op_count: int
    max_depth: int


class RoundTripHarness:
    """Explores depths 0..max_depth of op_count-statement programs."""

    def __init__(
        self,
        config: Optional[Config] = None,
        op_count: int = 1,
        max_depth: int = 0,
        parse_fn: ParseFn = parse,
    ):
        self.config = config if config is not None else Config()
        self.config.sanity()
        if not 0 <= op_count <= len(VALID_NAMES):
            raise ConfigError(
                f"op count must be between 0 and {len(VALID_NAMES)}, got {op_count}"
            )
        if max_depth < 0:
            raise ConfigError(f"depth must be >= 0, got {max_depth}")
        self.op_count = op_count
        self.max_depth = max_depth
        self.parse_fn = parse_fn
        self.ok_count = 0

    def pairs(self, depth: int) -> LazyStream[Tuple[Tree, Render]]:
        """Every (program, rendering) at depth; each program is rebuilt once, before its renderings."""

        def renderings(program: Tree) -> LazyStream[Tuple[Tree, Render]]:
            self.rebuild(program)
            return program_renderings(program).map(lambda render: (program, render))

        return valid_calculation(self.op_count, depth).flat_map(renderings)

    def rebuild(self, program: Tree) -> None:
        try:
            build_symbol_table(program)
        except SymbolTableError as exc:
            report = "\n".join([
                "Problem rebuilding symbol table for this program:",
                tree_text(program).rstrip("\n"),
                str(exc),
            ])
            raise RebuildError("symbol table rebuild failed", report) from exc

    def _log_progress(self) -> None:
        count = self.ok_count
        if (count > 1000 and count % 1000 == 0) or (count <= 1000 and count % 100 == 0):
            logger.info("%d programs ok...", count)

    def run(self) -> RoundTripSummary:
        logger.info("Testing BFS-generated programs, up to depth %d.", self.max_depth)

        for depth in range(self.max_depth + 1):
            logger.info("Exploring depth %d...", depth)
            for program, render in self.pairs(depth):
                logger.debug("checking %r", str(render))
                check_rendering(program, render, self.config, self.parse_fn)
                self.ok_count += 1
                self._log_progress()

        logger.info("Tested %d programs, all ok.", self.ok_count)
        return RoundTripSummary(self.ok_count, self.op_count, self.max_depth)
