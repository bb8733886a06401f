import logging
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from descent import descent_cli
from descent.descent_render import GRAPHVIZ_HOME

CLI_LOGGER = "descent.descent_cli"


@pytest.fixture(autouse=True)  # type: ignore[misc]
def restore_logger() -> Iterator[None]:
    # main() may attach a console handler bound to the captured stderr.
    handlers, level = list(descent_cli.LOGGER.handlers), descent_cli.LOGGER.level
    yield
    descent_cli.LOGGER.handlers[:] = handlers
    descent_cli.LOGGER.setLevel(level)


def test_run_descent_string_input_prints(capsys: pytest.CaptureFixture[str]) -> None:
    status = descent_cli.run_descent(source="write 1 + 2 * 3", is_string=True)
    out = capsys.readouterr().out
    assert status == descent_cli.EXIT_OK
    assert out.startswith("digraph ParseTree {")
    assert '[label="3", shape=oval, style=bold]' in out


def test_run_descent_file_input(
    program_file: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    status = descent_cli.run_descent(source=str(program_file), fmt="outline")
    out = capsys.readouterr().out
    assert status == descent_cli.EXIT_OK
    assert out.startswith("Parse Tree\n")
    assert "<SUBR_CALL>" in out
    assert "report" in out


def test_run_descent_missing_file(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.ERROR, logger=CLI_LOGGER):
        status = descent_cli.run_descent(source=str(tmp_path / "missing.txt"))
    assert status == descent_cli.EXIT_UNREADABLE
    assert "Error reading the file" in caplog.text


def test_run_descent_rejected_program_still_renders(
    capsys: pytest.CaptureFixture[str], caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.ERROR, logger=CLI_LOGGER):
        status = descent_cli.run_descent(source="read", is_string=True)
    out = capsys.readouterr().out
    assert status == descent_cli.EXIT_REJECTED
    assert "color=red" in out
    assert "expected identifier but found end-of-input" in caplog.text


def test_run_descent_duplicate_declaration(
    capsys: pytest.CaptureFixture[str], caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.ERROR, logger=CLI_LOGGER):
        status = descent_cli.run_descent(
            source="var a\nvar a", is_string=True, fmt="json"
        )
    assert status == descent_cli.EXIT_REJECTED
    assert '"accepted": false' in capsys.readouterr().out
    assert "already declared" in caplog.text


def test_run_descent_output_file(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    output_path = tmp_path / "tree.dot"
    status = descent_cli.run_descent(
        source="var total", is_string=True, out=str(output_path)
    )
    assert status == descent_cli.EXIT_OK
    assert capsys.readouterr().out == ""
    assert output_path.read_text(encoding="utf-8").startswith("digraph ParseTree {")


def test_run_descent_url(capsys: pytest.CaptureFixture[str]) -> None:
    descent_cli.run_descent(source="var total", is_string=True, url=True)
    last_line = capsys.readouterr().out.splitlines()[-1]
    assert last_line.startswith(GRAPHVIZ_HOME + "#")


def test_run_descent_url_ignored_for_outline(capsys: pytest.CaptureFixture[str]) -> None:
    descent_cli.run_descent(source="var total", is_string=True, fmt="outline", url=True)
    assert GRAPHVIZ_HOME not in capsys.readouterr().out


def test_run_descent_url_too_long(capsys: pytest.CaptureFixture[str]) -> None:
    descent_cli.run_descent(source="read n\n" * 2000, is_string=True, url=True)
    captured = capsys.readouterr()
    assert GRAPHVIZ_HOME not in captured.out
    assert "too long" in captured.err


def test_run_descent_too_deep(
    capsys: pytest.CaptureFixture[str], caplog: pytest.LogCaptureFixture
) -> None:
    source = "write " + "(" * 5000 + "1" + ")" * 5000
    with caplog.at_level(logging.ERROR, logger=CLI_LOGGER):
        status = descent_cli.run_descent(source=source, is_string=True)
    assert status == descent_cli.EXIT_TOO_DEEP
    assert capsys.readouterr().out == ""
    assert "nested too deeply" in caplog.text


@pytest.mark.parametrize("fmt", ["dot", "outline", "json"])  # type: ignore[misc]
@pytest.mark.parametrize(
    "source",
    [
        "\n".join(f"write {i}" for i in range(3000)),
        "write " + " + ".join("1" for _ in range(3000)),
    ],
)  # type: ignore[misc]
def test_run_descent_long_flat_program(
    source: str, fmt: str, capsys: pytest.CaptureFixture[str]
) -> None:
    status = descent_cli.run_descent(source=source, is_string=True, fmt=fmt)
    assert status == descent_cli.EXIT_OK
    assert capsys.readouterr().out


def test_check_logs_acceptance(caplog: pytest.LogCaptureFixture) -> None:
    from descent.descent_tree import ParseTree

    tree = ParseTree()
    with caplog.at_level(logging.DEBUG, logger=CLI_LOGGER):
        assert descent_cli.check("read n", tree) == descent_cli.EXIT_OK
    assert tree.accepted
    assert f"accepted: {len(tree)} nodes" in caplog.text


def test_main_entry(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(sys, "argv", ["descent", "-s", "var x", "-f", "outline"])
    with pytest.raises(SystemExit) as e:
        descent_cli.main()
    assert e.value.code == 0
    assert "<VAR_DECL>" in capsys.readouterr().out


def test_main_passes_flags(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[dict[str, object]] = []
    monkeypatch.setattr(
        sys, "argv", ["descent", "prog.txt", "-f", "json", "-o", "t.json", "--url", "-d"]
    )
    monkeypatch.setattr(
        descent_cli, "run_descent", lambda **kwargs: calls.append(kwargs) or 0
    )
    with pytest.raises(SystemExit):
        descent_cli.main()
    assert calls == [
        {
            "source": "prog.txt",
            "is_string": False,
            "fmt": "json",
            "out": "t.json",
            "url": True,
        }
    ]
    assert descent_cli.LOGGER.level == logging.DEBUG


def test_main_debug_attaches_console_handler(monkeypatch: pytest.MonkeyPatch) -> None:
    descent_cli.LOGGER.handlers.clear()
    monkeypatch.setattr(sys, "argv", ["descent", "-s", "var x", "-d"])
    with pytest.raises(SystemExit):
        descent_cli.main()
    [handler] = descent_cli.LOGGER.handlers
    assert isinstance(handler, logging.StreamHandler)
    assert handler.level == logging.DEBUG


def test_main_without_debug_uses_basic_config(monkeypatch: pytest.MonkeyPatch) -> None:
    descent_cli.LOGGER.handlers.clear()
    configured: list[dict[str, object]] = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: configured.append(kwargs))
    monkeypatch.setattr(sys, "argv", ["descent", "-s", "var x"])
    with pytest.raises(SystemExit):
        descent_cli.main()
    assert descent_cli.LOGGER.handlers == []
    assert configured == [{"format": "%(levelname)s: %(message)s"}]


def test_main_invalid_format(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sys, "argv", ["descent", "-f", "svg", "-s", "var x"])
    with pytest.raises(SystemExit) as e:
        descent_cli.main()
    assert e.value.code == 2


@settings(suppress_health_check=[HealthCheck.function_scoped_fixture])  # type: ignore[misc]
@given(st.text(max_size=200))  # type: ignore[misc]
def test_run_descent_random_input_does_not_crash(source: str) -> None:
    status = descent_cli.run_descent(source=source, is_string=True, fmt="json")
    assert status in (
        descent_cli.EXIT_OK,
        descent_cli.EXIT_REJECTED,
        descent_cli.EXIT_TOO_DEEP,
    )
