"""Unit tests for settings loading and engine construction."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from turnflow.config import EngineSettings, create_engine
from turnflow.workflow.registry import DefinitionLoadError

_ENV_VARS = (
    "TURNFLOW_LOG_LEVEL",
    "TURNFLOW_LOG_FORMAT",
    "TURNFLOW_DEFINITIONS_PATH",
    "TURNFLOW_LOAD_BUILTINS",
)


@pytest.fixture
def clean_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_settings_defaults(clean_env: Path) -> None:
    settings = EngineSettings()

    assert settings.log_level == "INFO"
    assert settings.log_format == "json"
    assert settings.definitions_path is None
    assert settings.load_builtin_definitions is True


def test_settings_loads_from_dotenv(clean_env: Path) -> None:
    (clean_env / ".env").write_text(
        "\n".join(
            [
                "TURNFLOW_LOG_LEVEL=debug",
                "TURNFLOW_LOG_FORMAT=text",
                "TURNFLOW_DEFINITIONS_PATH=flows/custom.jsonl",
                "TURNFLOW_LOAD_BUILTINS=false",
                "",
            ]
        ),
        encoding="utf-8",
    )

    settings = EngineSettings()

    assert settings.log_level == "DEBUG"
    assert settings.log_format == "text"
    assert settings.definitions_path == Path("flows/custom.jsonl")
    assert settings.load_builtin_definitions is False


def test_settings_reject_unknown_log_level(clean_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TURNFLOW_LOG_LEVEL", "CHATTY")

    with pytest.raises(ValidationError):
        EngineSettings()


def test_create_engine_loads_builtins_and_extra_file(clean_env: Path, make_record) -> None:
    extra = clean_env / "extra.jsonl"
    extra.write_text(json.dumps(make_record()) + "\n", encoding="utf-8")

    engine = create_engine(EngineSettings(definitions_path=extra))

    assert engine.registry.ids() == ["transcribe", "notes", "test-flow"]


def test_create_engine_without_builtins(clean_env: Path) -> None:
    engine = create_engine(EngineSettings(load_builtin_definitions=False))

    assert len(engine.registry) == 0
    assert not engine.should_trigger("transcribe")


def test_create_engine_surfaces_malformed_definitions(clean_env: Path) -> None:
    bad = clean_env / "bad.jsonl"
    bad.write_text("{oops\n", encoding="utf-8")

    with pytest.raises(DefinitionLoadError):
        create_engine(EngineSettings(definitions_path=bad, load_builtin_definitions=False))
