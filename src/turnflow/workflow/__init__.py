"""Declarative multi-turn conversational workflows.

This package provides:
- Workflow definitions and their JSON record format
- The per-activation context and template resolution
- Named freeform-capture handlers
- Action records and listener dispatch
- The workflow registry and the state-machine engine
"""

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
from .definitions import (
    EXIT,
    StateDefinition,
    Target,
    TargetKind,
    UiHints,
    WorkflowDefinition,
    parse_target,
)
from .engine import WorkflowEngine
from .events import EventEmitter, WorkflowListener
from .handlers import HandlerRegistry, WorkflowHandler, accumulate, bullets
from .registry import (
    DefinitionLoadError,
    WorkflowRegistry,
    builtin_definitions_path,
    check_definition,
    parse_batch,
)
from .templates import resolve_template, template_variables

__all__ = [
    "EXIT",
    "NOT_CONSUMED",
    "ActionType",
    "ContextSnapshot",
    "DefinitionLoadError",
    "EnterState",
    "EventEmitter",
    "ExitWorkflow",
    "HandleResult",
    "HandlerRegistry",
    "InputCaptured",
    "Message",
    "StateDefinition",
    "Target",
    "TargetKind",
    "UiHints",
    "WorkflowAction",
    "WorkflowContext",
    "WorkflowDefinition",
    "WorkflowEngine",
    "WorkflowHandler",
    "WorkflowListener",
    "WorkflowRegistry",
    "accumulate",
    "builtin_definitions_path",
    "bullets",
    "check_definition",
    "parse_batch",
    "parse_target",
    "resolve_template",
    "template_variables",
]
