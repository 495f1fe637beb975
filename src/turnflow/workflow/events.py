from __future__ import annotations

import logging
from collections.abc import Callable, Hashable
from types import ModuleType

from .actions import ActionType, WorkflowAction

logger = logging.getLogger(__name__)

WorkflowListener = Callable[[WorkflowAction], None]


def _listener_key(listener: WorkflowListener) -> Hashable:
    # Bound methods are rebuilt on every attribute access; key them by receiver and function.
    owner = getattr(listener, "__self__", None)
    if owner is not None and not isinstance(owner, ModuleType):
        return (id(owner), getattr(listener, "__func__", None) or listener.__name__)
    return id(listener)


class EventEmitter:
    """Listener sets keyed by action type.

    Listeners run in registration order. Adding the same listener twice is a
    no-op; removal is by identity. A listener that raises is logged and the
    remaining listeners still run.
    """

    def __init__(self) -> None:
        # Keyed by identity, not equality, so unhashable or equal listeners are fine.
        self._listeners: dict[ActionType, dict[Hashable, WorkflowListener]] = {}

    def on(self, event: ActionType | str, listener: WorkflowListener) -> None:
        listeners = self._listeners.setdefault(ActionType(event), {})
        listeners.setdefault(_listener_key(listener), listener)

    def off(self, event: ActionType | str, listener: WorkflowListener) -> None:
        listeners = self._listeners.get(ActionType(event))
        if listeners is not None:
            listeners.pop(_listener_key(listener), None)

    def listener_count(self, event: ActionType | str) -> int:
        return len(self._listeners.get(ActionType(event), {}))

    def emit(self, action: WorkflowAction) -> None:
        listeners = self._listeners.get(action.type)
        if not listeners:
            return
        # Snapshot so listeners may subscribe/unsubscribe while we iterate.
        for listener in list(listeners.values()):
            try:
                listener(action)
            except Exception:
                logger.exception(
                    "Workflow listener failed",
                    extra={"action_type": action.type.value, "workflow_id": action.workflow_id},
                )
