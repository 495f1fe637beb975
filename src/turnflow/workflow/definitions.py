"""Workflow definitions: the declarative blueprint the engine interprets.

Definitions arrive as JSON records (one per workflow) and are validated with
pydantic at the boundary. The engine itself works with the frozen dataclasses
below, where transition targets are already parsed into `Target` values.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

WILDCARD = "*"
EXIT_KEYWORD = "exit"


class TargetKind(str, Enum):
    EXIT = "exit"
    GOTO = "goto"


@dataclass(frozen=True, slots=True)
class Target:
    """Where a transition leads.

    `message`, when set, overrides the exit message or the target state's
    `on_enter` for this one transition. An empty string is a valid override.
    """

    kind: TargetKind
    state_id: str | None = None
    message: str | None = None

    @property
    def is_exit(self) -> bool:
        return self.kind is TargetKind.EXIT

    def to_wire(self) -> str:
        head = EXIT_KEYWORD if self.is_exit else (self.state_id or "")
        if self.message is None:
            return head
        return f"{head}:{self.message}"


EXIT = Target(kind=TargetKind.EXIT)


def parse_target(raw: str) -> Target:
    """Parse the compact string form of a target.

    Forms: ``exit``, ``exit:<message>``, ``<stateId>`` and
    ``<stateId>:<message>``. Only the first colon separates; the message may
    contain further colons.
    """

    head, sep, message = raw.partition(":")
    override = message if sep else None
    if head == EXIT_KEYWORD:
        return Target(kind=TargetKind.EXIT, message=override)
    return Target(kind=TargetKind.GOTO, state_id=head, message=override)


@dataclass(frozen=True, slots=True)
class StateDefinition:
    id: str
    on_enter: str
    transitions: Mapping[str, Target] = field(default_factory=dict)
    handler: str | None = None
    max_turns: int | None = None
    max_turns_target: Target = EXIT

    def __post_init__(self) -> None:
        object.__setattr__(self, "transitions", MappingProxyType(dict(self.transitions)))

    def target_for(self, intent: str) -> Target | None:
        """Exact intent match first, then the wildcard."""

        target = self.transitions.get(intent)
        if target is None:
            target = self.transitions.get(WILDCARD)
        return target

    @property
    def has_turn_cap(self) -> bool:
        # 0 and None both mean "no cap".
        return bool(self.max_turns)

    @property
    def is_capture_state(self) -> bool:
        return bool(self.handler) and not self.transitions


@dataclass(frozen=True, slots=True)
class UiHints:
    """Presentation hints for hosts. The engine never reads them."""

    indicator_label: str
    indicator_hint: str
    bubble_class: str


@dataclass(frozen=True, slots=True)
class WorkflowDefinition:
    id: str
    trigger_intent: str
    initial_state: str
    states: Mapping[str, StateDefinition]
    exit_phrases: tuple[str, ...] = ()
    exit_message: str = ""
    ui: UiHints | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "states", MappingProxyType(dict(self.states)))
        object.__setattr__(self, "exit_phrases", tuple(self.exit_phrases))

    def state(self, state_id: str | None) -> StateDefinition | None:
        if state_id is None:
            return None
        return self.states.get(state_id)

    def matches_exit_phrase(self, text: str) -> bool:
        lowered = text.lower().strip()
        return any(phrase.lower() in lowered for phrase in self.exit_phrases)

    def with_state(self, state: StateDefinition) -> WorkflowDefinition:
        """Return a copy with `state` added or replacing the one with its id."""

        states = dict(self.states)
        states[state.id] = state
        return replace(self, states=states)

    def to_record(self) -> dict[str, object]:
        return WorkflowRecord.from_definition(self).model_dump(
            by_alias=True, exclude_none=True
        )

    @staticmethod
    def from_record(obj: Mapping[str, Any]) -> WorkflowDefinition:
        return WorkflowRecord.model_validate(obj).to_definition()


# -- wire records -------------------------------------------------------------


class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class UiRecord(_Record):
    indicator_label: str = Field(alias="indicatorLabel")
    indicator_hint: str = Field(alias="indicatorHint")
    bubble_class: str = Field(alias="bubbleClass")


class StateRecord(_Record):
    id: str
    on_enter: str = Field(alias="onEnter")
    transitions: dict[str, str] = Field(default_factory=dict)
    handler: str | None = None
    max_turns: int | None = Field(default=None, alias="maxTurns", ge=0)
    max_turns_target: str | None = Field(default=None, alias="maxTurnsTarget")

    def to_definition(self) -> StateDefinition:
        return StateDefinition(
            id=self.id,
            on_enter=self.on_enter,
            transitions={intent: parse_target(raw) for intent, raw in self.transitions.items()},
            handler=self.handler,
            max_turns=self.max_turns,
            max_turns_target=(
                parse_target(self.max_turns_target) if self.max_turns_target is not None else EXIT
            ),
        )

    @staticmethod
    def from_definition(state: StateDefinition) -> StateRecord:
        return StateRecord(
            id=state.id,
            on_enter=state.on_enter,
            transitions={intent: t.to_wire() for intent, t in state.transitions.items()},
            handler=state.handler,
            max_turns=state.max_turns,
            max_turns_target=(
                None if state.max_turns_target == EXIT else state.max_turns_target.to_wire()
            ),
        )


class WorkflowRecord(_Record):
    """One line of a definitions batch."""

    id: str
    trigger_intent: str = Field(alias="triggerIntent")
    initial_state: str = Field(alias="initialState")
    exit_phrases: list[str] = Field(default_factory=list, alias="exitPhrases")
    exit_message: str = Field(alias="exitMessage")
    states: dict[str, StateRecord]
    ui: UiRecord | None = None

    @model_validator(mode="after")
    def _state_ids_match_keys(self) -> WorkflowRecord:
        for key, state in self.states.items():
            if state.id != key:
                raise ValueError(f"State key {key!r} does not match its id {state.id!r}")
        return self

    def to_definition(self) -> WorkflowDefinition:
        ui = None
        if self.ui is not None:
            ui = UiHints(
                indicator_label=self.ui.indicator_label,
                indicator_hint=self.ui.indicator_hint,
                bubble_class=self.ui.bubble_class,
            )
        return WorkflowDefinition(
            id=self.id,
            trigger_intent=self.trigger_intent,
            initial_state=self.initial_state,
            exit_phrases=tuple(self.exit_phrases),
            exit_message=self.exit_message,
            states={key: state.to_definition() for key, state in self.states.items()},
            ui=ui,
        )

    @staticmethod
    def from_definition(definition: WorkflowDefinition) -> WorkflowRecord:
        ui = None
        if definition.ui is not None:
            ui = UiRecord(
                indicator_label=definition.ui.indicator_label,
                indicator_hint=definition.ui.indicator_hint,
                bubble_class=definition.ui.bubble_class,
            )
        return WorkflowRecord(
            id=definition.id,
            trigger_intent=definition.trigger_intent,
            initial_state=definition.initial_state,
            exit_phrases=list(definition.exit_phrases),
            exit_message=definition.exit_message,
            states={
                key: StateRecord.from_definition(state) for key, state in definition.states.items()
            },
            ui=ui,
        )
