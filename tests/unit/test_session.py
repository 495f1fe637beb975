"""Unit tests for classifier + engine composition."""

from __future__ import annotations

from turnflow.session import WorkflowSession
from turnflow.workflow.actions import EnterState, ExitWorkflow, InputCaptured
from turnflow.workflow.engine import WorkflowEngine


def test_blank_input_is_ignored(builtin_engine: WorkflowEngine, classifier) -> None:
    session = WorkflowSession(builtin_engine, classifier)

    assert session.process("   ") is None
    assert classifier.calls == []


def test_full_flow_through_classifier(builtin_engine: WorkflowEngine, classifier) -> None:
    session = WorkflowSession(builtin_engine, classifier)

    started = session.process("  start transcribing ")
    assert started.intent == "transcribe"
    assert started.text == "start transcribing"
    assert isinstance(started.action, EnterState)

    recording = session.process("go ahead")
    assert recording.action.state_id == "recording"

    captured = session.process("yes no cancel")
    assert captured.classifier_bypassed
    assert captured.intent == "unknown"
    assert isinstance(captured.action, InputCaptured)

    done = session.process("stop transcribe")
    assert isinstance(done.action, ExitWorkflow)
    assert done.action.message == "Transcript locked. 3 words captured."

    assert classifier.calls == ["start transcribing", "go ahead"]


def test_capture_bypass_keeps_literal_answers(builtin_engine: WorkflowEngine, classifier) -> None:
    session = WorkflowSession(builtin_engine, classifier)
    session.process("transcribe mode")
    session.process("yes")

    # "no" would classify as deny, but recording captures it verbatim.
    turn = session.process("no")

    assert turn.consumed
    assert builtin_engine.get_context().buffer == "no"


def test_unconsumed_input_is_reported(builtin_engine: WorkflowEngine, classifier) -> None:
    session = WorkflowSession(builtin_engine, classifier)

    turn = session.process("what's the weather")

    assert turn is not None
    assert not turn.consumed
    assert turn.action is None
    assert turn.intent == "unknown"
    assert not builtin_engine.is_active()
