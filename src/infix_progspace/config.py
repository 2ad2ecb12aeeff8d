"""Grammar configuration switches shared by the reader and the harness."""

from __future__ import annotations

import argparse
from dataclasses import dataclass


class ConfigError(Exception):
    """Raised for contradictory configuration switches."""


@dataclass(frozen=True)
class Config:
    """
    Which optional grammar features the reader accepts.

    enable_tuples: tuple literals, append(...) and tuple indexing
    tuples_require_parens: reject bare `a, b` tuples at statement level
    """

    enable_tuples: bool = True
    tuples_require_parens: bool = False

    def sanity(self) -> None:
        if self.tuples_require_parens and not self.enable_tuples:
            raise ConfigError("--tuples-require-parens needs tuples to be enabled")

    def install_cli(self, parser: argparse.ArgumentParser) -> None:
        """Register this config's switches on an argparse (sub)parser."""
        parser.add_argument(
            "--disable-tuples",
            dest="enable_tuples",
            action="store_false",
            default=self.enable_tuples,
            help="Reject tuple literals, append(...) and tuple indexing",
        )
        parser.add_argument(
            "--tuples-require-parens",
            dest="tuples_require_parens",
            action="store_true",
            default=self.tuples_require_parens,
            help="Require parentheses around every tuple literal",
        )

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> Config:
        return cls(
            enable_tuples=args.enable_tuples,
            tuples_require_parens=args.tuples_require_parens,
        )
