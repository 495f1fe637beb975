"""The workflow engine: a state-machine interpreter over workflow definitions.

At most one workflow instance is active per engine. Each input is resolved by
a fixed pipeline:

1. idle: activate the workflow whose trigger matches the intent;
2. active: an exit phrase anywhere in the text exits immediately;
3. count the turn;
4. a state over its `max_turns` cap is redirected to its `max_turns_target`;
5. the intent (or the ``*`` wildcard) selects a transition;
6. otherwise the state's handler captures the text;
7. otherwise the input is not consumed.

Run-time faults in a definition (dangling targets, unknown handlers) never
raise; they degrade to an exit or to "not consumed" and are logged.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path

from .actions import (
    NOT_CONSUMED,
    ActionType,
    EnterState,
    ExitWorkflow,
    HandleResult,
    InputCaptured,
    Message,
    WorkflowAction,
)
from .context import ContextSnapshot, WorkflowContext
from .definitions import StateDefinition, Target, WorkflowDefinition
from .events import EventEmitter, WorkflowListener
from .handlers import HandlerRegistry, WorkflowHandler
from .registry import WorkflowRegistry
from .templates import resolve_template

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _ActiveInstance:
    workflow_id: str
    state_id: str | None = None
    context: WorkflowContext = field(default_factory=WorkflowContext)


class WorkflowEngine:
    def __init__(
        self,
        registry: WorkflowRegistry | None = None,
        handlers: HandlerRegistry | None = None,
    ) -> None:
        self.registry = registry or WorkflowRegistry()
        self.handlers = handlers or HandlerRegistry()
        self._events = EventEmitter()
        self._active: _ActiveInstance | None = None
        self._lock = threading.RLock()

    # -- registration -------------------------------------------------------

    def register(self, definition: WorkflowDefinition) -> None:
        """Insert or replace a definition.

        Replacing the active workflow's definition is allowed: the running
        instance keeps its context and reads the new definition from the next
        input on.
        """

        with self._lock:
            self.registry.register(definition)

    def register_handler(self, name: str, handler: WorkflowHandler) -> None:
        with self._lock:
            self.handlers.register(name, handler)

    def load_batch(self, text: str) -> list[str]:
        with self._lock:
            return self.registry.load_batch(text)

    def load_file(self, path: Path) -> list[str]:
        with self._lock:
            return self.registry.load_file(path)

    # -- queries ------------------------------------------------------------

    def should_trigger(self, intent: str) -> bool:
        return self.registry.should_trigger(intent)

    def is_active(self) -> bool:
        return self._active is not None

    def get_active_workflow_id(self) -> str | None:
        return self._active.workflow_id if self._active is not None else None

    def get_active_state_id(self) -> str | None:
        return self._active.state_id if self._active is not None else None

    def get_context(self) -> ContextSnapshot:
        if self._active is None:
            return ContextSnapshot()
        return self._active.context.snapshot()

    def is_capturing(self) -> bool:
        """True when the active state is a pure freeform-capture state.

        Hosts use this to skip intent classification for the turn.
        """

        state = self._active_state()
        return state is not None and state.is_capture_state

    # -- listeners ----------------------------------------------------------

    def on(self, event: ActionType | str, listener: WorkflowListener) -> None:
        self._events.on(event, listener)

    def off(self, event: ActionType | str, listener: WorkflowListener) -> None:
        self._events.off(event, listener)

    # -- input handling -----------------------------------------------------

    def handle_input(self, text: str, intent: str) -> HandleResult:
        with self._lock:
            if self._active is None:
                return self._try_activate(intent)

            definition = self._active_definition()
            if definition is not None and definition.matches_exit_phrase(text):
                logger.debug("Exit phrase matched", extra={"workflow_id": definition.id})
                return self._exit()

            state = self._active_state()
            if state is None:
                logger.warning(
                    "Active state vanished from its definition; exiting",
                    extra={
                        "workflow_id": self._active.workflow_id,
                        "state_id": self._active.state_id,
                    },
                )
                return self._exit()

            ctx = self._active.context
            ctx.turn_count += 1
            ctx.state_turn_count += 1

            if state.max_turns and ctx.state_turn_count > state.max_turns:
                logger.debug(
                    "Turn cap exceeded",
                    extra={"state_id": state.id, "max_turns": state.max_turns},
                )
                return self._follow(state.max_turns_target)

            target = state.target_for(intent)
            if target is not None:
                return self._follow(target)

            return self._capture(state, text)

    def announce(self, message: str) -> Message:
        """Emit a `message` action resolved against the active context."""

        with self._lock:
            if self._active is not None:
                resolved = resolve_template(message, self._active.context)
                workflow_id: str | None = self._active.workflow_id
            else:
                resolved = resolve_template(message, WorkflowContext())
                workflow_id = None
            action = Message(workflow_id=workflow_id, message=resolved)
            self._events.emit(action)
            return action

    def reset(self) -> None:
        """Drop the active instance, if any, without emitting an exit."""

        with self._lock:
            if self._active is not None:
                logger.info(
                    "Workflow reset", extra={"workflow_id": self._active.workflow_id}
                )
            self._active = None

    # -- internals ----------------------------------------------------------

    def _active_definition(self) -> WorkflowDefinition | None:
        # Always resolved through the registry so re-registration takes effect.
        if self._active is None:
            return None
        return self.registry.get(self._active.workflow_id)

    def _active_state(self) -> StateDefinition | None:
        definition = self._active_definition()
        if definition is None or self._active is None:
            return None
        return definition.state(self._active.state_id)

    def _try_activate(self, intent: str) -> HandleResult:
        definition = self.registry.find_by_trigger(intent)
        if definition is None:
            return NOT_CONSUMED

        logger.info(
            "Workflow activated",
            extra={"workflow_id": definition.id, "intent": intent},
        )
        self._active = _ActiveInstance(workflow_id=definition.id)
        return self._enter(definition.initial_state)

    def _follow(self, target: Target) -> HandleResult:
        if target.is_exit:
            return self._exit(target.message)
        assert target.state_id is not None
        return self._enter(target.state_id, target.message)

    def _enter(self, state_id: str, message: str | None = None) -> HandleResult:
        assert self._active is not None
        definition = self._active_definition()
        state = definition.state(state_id) if definition is not None else None
        if definition is None or state is None:
            logger.warning(
                "Transition to undefined state; exiting",
                extra={"workflow_id": self._active.workflow_id, "state_id": state_id},
            )
            return self._exit()

        ctx = self._active.context
        if self._active.state_id != state_id:
            ctx.state_turn_count = 0
        self._active.state_id = state_id

        template = message if message is not None else state.on_enter
        action = EnterState(
            workflow_id=definition.id,
            state_id=state_id,
            message=resolve_template(template, ctx),
        )
        logger.debug("Entered state", extra={"workflow_id": definition.id, "state_id": state_id})
        return self._dispatch(action)

    def _capture(self, state: StateDefinition, text: str) -> HandleResult:
        assert self._active is not None
        if not state.handler:
            return NOT_CONSUMED

        handler = self.handlers.get(state.handler)
        if handler is None:
            logger.warning(
                "State names an unregistered handler; input not consumed",
                extra={"state_id": state.id, "handler": state.handler},
            )
            return NOT_CONSUMED

        handler(text, self._active.context)
        action = InputCaptured(
            workflow_id=self._active.workflow_id,
            state_id=self._active.state_id or state.id,
        )
        return self._dispatch(action)

    def _exit(self, message: str | None = None) -> HandleResult:
        assert self._active is not None
        active = self._active
        definition = self.registry.get(active.workflow_id)

        if message is not None:
            template = message
        elif definition is not None:
            template = definition.exit_message
        else:
            template = ""

        action = ExitWorkflow(
            workflow_id=active.workflow_id,
            message=resolve_template(template, active.context),
            context=active.context.snapshot(),
        )
        # Back to idle before listeners run, so they may trigger a new workflow.
        self._active = None
        logger.info(
            "Workflow exited",
            extra={"workflow_id": action.workflow_id, "turn_count": action.context.turn_count},
        )
        return self._dispatch(action)

    def _dispatch(self, action: WorkflowAction) -> HandleResult:
        self._events.emit(action)
        return HandleResult(consumed=True, action=action)
