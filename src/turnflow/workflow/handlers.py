"""Named handlers for freeform capture states.

A handler receives the raw input text and mutates the workflow context in
place. States refer to handlers by name, so definitions stay plain data.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping

from .context import WorkflowContext

logger = logging.getLogger(__name__)

WorkflowHandler = Callable[[str, WorkflowContext], None]


def accumulate(text: str, ctx: WorkflowContext) -> None:
    """Append text to the buffer, space-separated."""

    ctx.buffer += (" " if ctx.buffer else "") + text


def bullets(text: str, ctx: WorkflowContext) -> None:
    """Append text as a ``- `` bullet, newline-separated."""

    ctx.buffer += ("\n" if ctx.buffer else "") + "- " + text


BUILTIN_HANDLERS: Mapping[str, WorkflowHandler] = {
    "accumulate": accumulate,
    "bullets": bullets,
}


class HandlerRegistry:
    """Name -> handler lookup, pre-populated with the built-ins."""

    def __init__(self, handlers: Mapping[str, WorkflowHandler] | None = None) -> None:
        self._handlers: dict[str, WorkflowHandler] = dict(BUILTIN_HANDLERS)
        if handlers:
            self._handlers.update(handlers)

    def register(self, name: str, handler: WorkflowHandler) -> None:
        if name in self._handlers:
            logger.debug("Overriding workflow handler", extra={"handler": name})
        self._handlers[name] = handler

    def get(self, name: str) -> WorkflowHandler | None:
        return self._handlers.get(name)

    def names(self) -> list[str]:
        return sorted(self._handlers)

    def __contains__(self, name: object) -> bool:
        return name in self._handlers
