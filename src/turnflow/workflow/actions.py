from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from .context import ContextSnapshot


class ActionType(str, Enum):
    ENTER_STATE = "enter-state"
    INPUT_CAPTURED = "input-captured"
    EXIT_WORKFLOW = "exit-workflow"
    MESSAGE = "message"


@dataclass(frozen=True, slots=True)
class EnterState:
    """The workflow entered (or re-entered) a state."""

    type: ClassVar[ActionType] = ActionType.ENTER_STATE

    workflow_id: str
    state_id: str
    message: str

    def to_json(self) -> dict[str, object]:
        return {
            "type": self.type.value,
            "workflowId": self.workflow_id,
            "stateId": self.state_id,
            "message": self.message,
        }


@dataclass(frozen=True, slots=True)
class InputCaptured:
    """A capture-state handler consumed the input."""

    type: ClassVar[ActionType] = ActionType.INPUT_CAPTURED

    workflow_id: str
    state_id: str

    def to_json(self) -> dict[str, object]:
        return {
            "type": self.type.value,
            "workflowId": self.workflow_id,
            "stateId": self.state_id,
        }


@dataclass(frozen=True, slots=True)
class ExitWorkflow:
    """The workflow finished. `context` is its memory at the moment of exit."""

    type: ClassVar[ActionType] = ActionType.EXIT_WORKFLOW

    workflow_id: str
    message: str
    context: ContextSnapshot

    def to_json(self) -> dict[str, object]:
        return {
            "type": self.type.value,
            "workflowId": self.workflow_id,
            "message": self.message,
            "context": self.context.to_json(),
        }


@dataclass(frozen=True, slots=True)
class Message:
    """A direct announcement that is not tied to a transition."""

    type: ClassVar[ActionType] = ActionType.MESSAGE

    workflow_id: str | None
    message: str

    def to_json(self) -> dict[str, object]:
        return {
            "type": self.type.value,
            "workflowId": self.workflow_id,
            "message": self.message,
        }


WorkflowAction = EnterState | InputCaptured | ExitWorkflow | Message


@dataclass(frozen=True, slots=True)
class HandleResult:
    """Outcome of one input.

    When `consumed` is false the caller should route the input elsewhere.
    """

    consumed: bool
    action: WorkflowAction | None = None

    def to_json(self) -> dict[str, object]:
        return {
            "consumed": self.consumed,
            "action": self.action.to_json() if self.action is not None else None,
        }


NOT_CONSUMED = HandleResult(consumed=False)
