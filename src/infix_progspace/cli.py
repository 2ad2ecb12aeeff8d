from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from lark import Tree

from .config import Config, ConfigError
from .harness import RoundTripError, RoundTripHarness
from .reader import parse
from .render import calculation_strings
from .writers import WriterError, write_infix, write_postfix


def _load_source(arg: str) -> str:
    """
    Resolve CLI input into source text.
    - "-" => read stdin.
    - Otherwise read the named file.
    """
    if arg == "-":
        return sys.stdin.read()
    return Path(arg).read_text(encoding="utf-8")


def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="infix-progspace",
        description="Explore and round-trip small infix programs",
    )
    ap.add_argument("-v", "--verbose", action="store_true", help="Log every checked rendering")
    sub = ap.add_subparsers(dest="command", required=True)

    bfs = sub.add_parser("bfs-test", help="Round-trip every small program up to a depth")
    Config().install_cli(bfs)
    bfs.add_argument("--op-count", type=int, default=1, help="How many statements per program (defaults to 1)")
    bfs.add_argument("--depth", type=int, default=0, help="How deeply nested should expressions be? (defaults to 0)")

    parse_cmd = sub.add_parser("parse", help="Parse a program and print it")
    Config().install_cli(parse_cmd)
    parse_cmd.add_argument("source", help="Path to a source file, or - for stdin")
    parse_cmd.add_argument(
        "--format",
        choices=("tree", "infix", "postfix"),
        default="tree",
        help="Print the parse tree (default) or a writer rendering",
    )

    render_cmd = sub.add_parser("render", help="Print every spelling of a program")
    Config().install_cli(render_cmd)
    render_cmd.add_argument("source", help="Path to a source file, or - for stdin")

    return ap


def _cmd_bfs_test(args: argparse.Namespace, config: Config) -> int:
    try:
        harness = RoundTripHarness(
            config=config,
            op_count=args.op_count,
            max_depth=args.depth,
        )
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    try:
        summary = harness.run()
    except RoundTripError as exc:
        print(exc.report)
        print("Aborting.")
        return 1

    print(f"Tested {summary.ok_count} programs, all ok.")
    return 0


def _read_program(args: argparse.Namespace, config: Config) -> Optional[Tree]:
    """Load and parse the source argument; errors go to stderr and yield None."""
    try:
        source = _load_source(args.source)
    except OSError as exc:
        print(f"Cannot read {args.source}: {exc.strerror or exc}", file=sys.stderr)
        return None

    result = parse(source, config)
    if not result.ok:
        for err in result.errors:
            print(err, file=sys.stderr)
        return None
    return result.tree


def _cmd_parse(args: argparse.Namespace, config: Config) -> int:
    tree = _read_program(args, config)
    if tree is None:
        return 1

    if args.format == "tree":
        print(tree.pretty(), end="")
        return 0

    writer = write_infix if args.format == "infix" else write_postfix
    try:
        print(writer(tree), end="")
    except WriterError as exc:
        print(f"Writer error: {exc}", file=sys.stderr)
        return 1
    return 0


def _cmd_render(args: argparse.Namespace, config: Config) -> int:
    tree = _read_program(args, config)
    if tree is None:
        return 1

    try:
        for render in calculation_strings(tree):
            marker = "*" if render.tuple_parens_omitted else " "
            print(f"{marker} {render}")
    except RecursionError:
        print("Render error: program nests too deeply to enumerate", file=sys.stderr)
        return 1
    return 0


COMMANDS = {
    "bfs-test": _cmd_bfs_test,
    "parse": _cmd_parse,
    "render": _cmd_render,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
    )

    config = Config.from_args(args)
    try:
        config.sanity()
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    return COMMANDS[args.command](args, config)


if __name__ == "__main__":
    sys.exit(main())
