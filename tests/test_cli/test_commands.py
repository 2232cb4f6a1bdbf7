import json
from pathlib import Path

import pytest
from structlog.testing import capture_logs
from typer.testing import CliRunner

import deckhand.main as main_module
from deckhand import __version__
from deckhand.main import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr(main_module, "configure_logging", lambda *args, **kwargs: None)
    with capture_logs():
        yield


def test_version_command():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert f"Deckhand v{__version__}" in result.output


def test_parse_reads_stdin():
    result = runner.invoke(
        app,
        ["parse"],
        input='text <tool name="read_file" path="a.py"/> more <tool name="propose_edit" path="b">B</tool>',
    )

    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert [item["name"] for item in payload] == ["read_file", "propose_edit"]
    assert payload[0]["parameters"] == {"path": "a.py"}
    assert payload[1]["body"] == "B"


def test_diff_prints_hunks(tmp_path: Path):
    old = tmp_path / "old.txt"
    new = tmp_path / "new.txt"
    old.write_text("a\nb\n", encoding="utf-8")
    new.write_text("a\nc\n", encoding="utf-8")

    result = runner.invoke(app, ["diff", str(old), str(new)])

    assert result.exit_code == 0
    assert "@@ -1,2 +1,2 @@" in result.output
    assert "-b" in result.output
    assert "+c" in result.output


def test_diff_identical_files(tmp_path: Path):
    same = tmp_path / "same.txt"
    same.write_text("x\n", encoding="utf-8")

    result = runner.invoke(app, ["diff", str(same), str(same)])

    assert result.output.strip() == "No differences."


def test_exec_applies_edits_and_prints_json(tmp_path: Path):
    (tmp_path / "app.py").write_text("VALUE = 1\n", encoding="utf-8")
    model_output = tmp_path / "reply.txt"
    model_output.write_text(
        'Updating.\n<tool name="edit_section" path="app.py" oldText="VALUE = 1" newText="VALUE = 2"/>',
        encoding="utf-8",
    )

    result = runner.invoke(app, ["exec", str(model_output), "--cwd", str(tmp_path), "--yes", "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert payload == [{"tool": "edit_section", "result": "Successfully updated app.py (+1 -1)"}]
    assert (tmp_path / "app.py").read_text(encoding="utf-8") == "VALUE = 2\n"


def test_exec_exits_non_zero_when_a_tool_fails(tmp_path: Path):
    result = runner.invoke(
        app,
        ["exec", "-", "--cwd", str(tmp_path), "--json"],
        input='<tool name="edit_section" path="missing.py" oldText="a" newText="b"/>',
    )

    assert result.exit_code == 1
    payload = json.loads(result.output)
    assert payload[0]["error"] == "File not found: missing.py"


def test_exec_json_keeps_command_output_inside_document(tmp_path: Path):
    result = runner.invoke(
        app,
        ["exec", "-", "--cwd", str(tmp_path), "--json"],
        input='<tool name="run_command" command="echo hi"/>',
    )

    assert result.exit_code == 0
    assert json.loads(result.output) == [{"tool": "run_command", "result": "hi\n"}]


def test_exec_reports_invalid_config(tmp_path: Path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("process: [", encoding="utf-8")

    result = runner.invoke(app, ["exec", "-", "--config", str(bad)], input="")

    assert result.exit_code == 2
