"""Test configuration and fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from turnflow.session import Classification
from turnflow.workflow.actions import ActionType, WorkflowAction
from turnflow.workflow.definitions import WorkflowDefinition
from turnflow.workflow.engine import WorkflowEngine
from turnflow.workflow.registry import builtin_definitions_path

DefFactory = Callable[..., WorkflowDefinition]


def make_test_record(**overrides: Any) -> dict[str, Any]:
    """A two-state workflow record; keyword overrides replace top-level keys."""

    record: dict[str, Any] = {
        "id": "test-flow",
        "triggerIntent": "test_trigger",
        "initialState": "step1",
        "exitPhrases": ["quit test", "exit test"],
        "exitMessage": "Done. {{wordCount}} words, {{turnCount}} turns.",
        "states": {
            "step1": {
                "id": "step1",
                "onEnter": "Welcome to step 1.",
                "transitions": {"confirm": "step2", "deny": "exit"},
            },
            "step2": {
                "id": "step2",
                "onEnter": "Now in step 2. Buffer: {{buffer}}",
                "handler": "accumulate",
                "transitions": {},
            },
        },
    }
    record.update(overrides)
    return record


@pytest.fixture
def make_def() -> DefFactory:
    """Build a `WorkflowDefinition` from the test record plus overrides."""

    def _make(**overrides: Any) -> WorkflowDefinition:
        return WorkflowDefinition.from_record(make_test_record(**overrides))

    return _make


@pytest.fixture
def engine() -> WorkflowEngine:
    return WorkflowEngine()


@pytest.fixture
def builtin_engine() -> WorkflowEngine:
    """An engine with the packaged definitions (transcribe, notes) loaded."""

    eng = WorkflowEngine()
    eng.load_file(builtin_definitions_path())
    return eng


@pytest.fixture
def recorded(engine: WorkflowEngine) -> list[WorkflowAction]:
    """Every action `engine` emits, in order."""

    actions: list[WorkflowAction] = []
    for event in ActionType:
        engine.on(event, actions.append)
    return actions


class StubClassifier:
    """Exact-match classifier used in place of a real intent model."""

    def __init__(self, intents: dict[str, str]) -> None:
        self.intents = intents
        self.calls: list[str] = []

    def classify(self, text: str) -> Classification:
        self.calls.append(text)
        intent = self.intents.get(text.lower())
        if intent is None:
            return Classification(intent="unknown")
        return Classification(intent=intent, score=1.0)


@pytest.fixture
def classifier() -> StubClassifier:
    return StubClassifier(
        {
            "transcribe mode": "transcribe",
            "start transcribing": "transcribe",
            "yes": "confirm",
            "go ahead": "confirm",
            "no": "deny",
            "cancel": "deny",
            "stop": "stop",
            "stop transcribe": "stop",
        }
    )


@pytest.fixture
def definitions_file(tmp_path: Path) -> Path:
    path = tmp_path / "workflows.jsonl"
    path.write_text(
        builtin_definitions_path().read_text(encoding="utf-8"),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def make_record() -> Callable[..., dict[str, Any]]:
    return make_test_record
