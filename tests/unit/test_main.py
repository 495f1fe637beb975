"""Unit tests for the CLI."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from turnflow.main import main


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in ("TURNFLOW_LOG_FORMAT", "TURNFLOW_DEFINITIONS_PATH", "TURNFLOW_LOAD_BUILTINS"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("TURNFLOW_LOG_LEVEL", "ERROR")
    monkeypatch.chdir(tmp_path)

    # main() reconfigures the root logger; put pytest's handlers back afterwards.
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in saved_handlers:
        root.addHandler(handler)
    root.setLevel(saved_level)


def test_validate_reports_ok(definitions_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["validate", str(definitions_file)]) == 0

    out = capsys.readouterr().out.splitlines()
    assert out == ["transcribe: ok", "notes: ok"]


def test_validate_strict_fails_on_diagnostics(
    tmp_path: Path, make_record, capsys: pytest.CaptureFixture[str]
) -> None:
    path = tmp_path / "flows.jsonl"
    path.write_text(json.dumps(make_record(initialState="missing")) + "\n", encoding="utf-8")

    assert main(["validate", str(path)]) == 0
    assert main(["validate", "--strict", str(path)]) == 2
    assert "initial state 'missing' is not defined" in capsys.readouterr().out


def test_validate_fails_on_malformed_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "broken.jsonl"
    path.write_text('{"id": "x"}\n', encoding="utf-8")

    assert main(["validate", str(path)]) == 1
    assert "line 1" in capsys.readouterr().err


def test_replay_prints_one_result_per_input(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    script = tmp_path / "script.jsonl"
    script.write_text(
        "\n".join(
            json.dumps(item)
            for item in [
                {"text": "transcribe mode", "intent": "transcribe"},
                {"text": "yes", "intent": "confirm"},
                {"text": "hello world"},
                {"text": "stop transcribe"},
                {"text": "tell me a joke", "intent": "question"},
            ]
        ),
        encoding="utf-8",
    )

    assert main(["replay", str(script)]) == 0

    lines = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
    assert [line["action"]["type"] if line["action"] else None for line in lines] == [
        "enter-state",
        "enter-state",
        "input-captured",
        "exit-workflow",
        None,
    ]
    assert lines[3]["action"]["message"] == "Transcript locked. 2 words captured."
    assert lines[4]["consumed"] is False


def test_replay_without_builtins_uses_given_definitions(
    tmp_path: Path, make_record, capsys: pytest.CaptureFixture[str]
) -> None:
    flows = tmp_path / "flows.jsonl"
    flows.write_text(json.dumps(make_record()) + "\n", encoding="utf-8")
    script = tmp_path / "script.jsonl"
    script.write_text(
        json.dumps({"text": "transcribe mode", "intent": "transcribe"})
        + "\n"
        + json.dumps({"text": "go", "intent": "test_trigger"})
        + "\n",
        encoding="utf-8",
    )

    assert main(["replay", "--no-builtins", "--definitions", str(flows), str(script)]) == 0

    lines = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
    assert lines[0]["consumed"] is False
    assert lines[1]["action"]["stateId"] == "step1"


def test_replay_rejects_bad_script(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    script = tmp_path / "script.jsonl"
    script.write_text('{"intent": "confirm"}\n', encoding="utf-8")

    assert main(["replay", str(script)]) == 1
    assert "expected an object" in capsys.readouterr().err
