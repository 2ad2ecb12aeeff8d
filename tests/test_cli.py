from __future__ import annotations

import io
from pathlib import Path

import pytest

from infix_progspace.cli import build_arg_parser, main


def _write(tmp_path: Path, source: str) -> str:
    path = tmp_path / "prog.infix"
    path.write_text(source, encoding="utf-8")
    return str(path)


def test_bfs_test_succeeds(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["bfs-test", "--op-count", "1", "--depth", "0"]) == 0
    assert capsys.readouterr().out.strip().endswith("Tested 8 programs, all ok.")


def test_bfs_test_defaults() -> None:
    args = build_arg_parser().parse_args(["bfs-test"])
    assert (args.op_count, args.depth) == (1, 0)
    assert args.enable_tuples is True
    assert args.tuples_require_parens is False


def test_bfs_test_with_switches(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["bfs-test", "--disable-tuples"]) == 0
    assert "Tested 8 programs, all ok." in capsys.readouterr().out


def test_contradictory_switches_exit_two(capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["bfs-test", "--disable-tuples", "--tuples-require-parens"])
    assert code == 2
    assert "Configuration error" in capsys.readouterr().err


def test_bfs_test_reports_counterexample(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    from infix_progspace import cli
    from infix_progspace.harness import RoundTripHarness
    from infix_progspace.reader import ParseResult

    def reject_all(source, config):
        return ParseResult(tree=None, ok=False, errors=["nope"])

    class RejectingHarness(RoundTripHarness):
        def __init__(self, **kwargs):
            super().__init__(parse_fn=reject_all, **kwargs)

    monkeypatch.setattr(cli, "RoundTripHarness", RejectingHarness)

    assert main(["bfs-test"]) == 1
    out = capsys.readouterr().out
    assert "Error reparsing this AST:" in out
    assert out.rstrip().endswith("Aborting.")


def test_parse_tree(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["parse", _write(tmp_path, "foo = 1 + 2;")]) == 0
    out = capsys.readouterr().out
    assert out.splitlines()[0] == "calculation"
    assert "add" in out


def test_parse_infix(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = _write(tmp_path, "foo = 1 + 2 * 0, 1;")
    assert main(["parse", path, "--format", "infix"]) == 0
    assert capsys.readouterr().out == "foo = ((1 + (2 * 0)), 1,);\n"


def test_parse_postfix_rejects_tuples(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = _write(tmp_path, "foo = (1,);")
    assert main(["parse", path, "--format", "postfix"]) == 1
    assert "Writer error" in capsys.readouterr().err


def test_parse_reports_errors(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = _write(tmp_path, "foo = 1, 2;")
    assert main(["parse", path, "--tuples-require-parens"]) == 1
    assert "requires parentheses" in capsys.readouterr().err


def test_parse_from_stdin(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO("foo = 0 - 1;"))
    assert main(["parse", "-", "--format", "postfix"]) == 0
    assert capsys.readouterr().out == "foo 0 1 - =\n"


def test_render_marks_omitted_parens(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["render", _write(tmp_path, "foo = 0, 1;")]) == 0
    assert capsys.readouterr().out.splitlines() == [
        "* foo = 0, 1;",
        "* foo = 0, 1,;",
        "  foo = (0, 1);",
        "  foo = (0, 1,);",
    ]


def test_bfs_test_rejects_op_count_out_of_range(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["bfs-test", "--op-count", "5"]) == 2
    err = capsys.readouterr().err
    assert "Configuration error: op count must be between 0 and 4, got 5" in err


def test_bfs_test_rejects_negative_depth(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["bfs-test", "--depth", "-1"]) == 2
    assert "Configuration error: depth must be >= 0" in capsys.readouterr().err


@pytest.mark.parametrize("command", ["parse", "render"])
def test_missing_source_file(
    command: str, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    missing = str(tmp_path / "missing.infix")
    assert main([command, missing]) == 1
    captured = capsys.readouterr()
    assert captured.err.startswith(f"Cannot read {missing}:")
    assert captured.out == ""


def test_render_long_sum_first_line(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    from infix_progspace import cli
    from infix_progspace.render import calculation_strings

    monkeypatch.setattr(cli, "calculation_strings", lambda tree: calculation_strings(tree).take(1))

    source = "foo = " + " + ".join(["1"] * 200) + ";"
    assert main(["render", _write(tmp_path, source)]) == 0
    assert capsys.readouterr().out == f"  {source}\n"


def test_render_too_deep_exits_one(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    from infix_progspace import cli

    def too_deep(tree):
        raise RecursionError("maximum recursion depth exceeded")

    monkeypatch.setattr(cli, "calculation_strings", too_deep)

    assert main(["render", _write(tmp_path, "foo = 1 + 1;")]) == 1
    assert "Render error: program nests too deeply" in capsys.readouterr().err
