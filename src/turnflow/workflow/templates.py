"""Template resolution for state and exit messages.

Templates reference context values as ``{{name}}`` or ``{{metadata.key}}``.
Unknown variables resolve to an empty string instead of raising, so a typo in
a definition shows up as a gap in the spoken message rather than a crash.
"""

from __future__ import annotations

import re

from .context import ContextSnapshot, WorkflowContext

TEMPLATE_PATTERN = re.compile(r"\{\{(\w+(?:\.\w+)*)\}\}")
METADATA_PREFIX = "metadata."

KNOWN_VARIABLES = frozenset({"buffer", "turnCount", "stateTurnCount", "wordCount"})


def _lookup(path: str, ctx: WorkflowContext | ContextSnapshot) -> str:
    if path == "buffer":
        return ctx.buffer
    if path == "turnCount":
        return str(ctx.turn_count)
    if path == "stateTurnCount":
        return str(ctx.state_turn_count)
    if path == "wordCount":
        return str(ctx.word_count)
    if path.startswith(METADATA_PREFIX):
        value = ctx.metadata.get(path[len(METADATA_PREFIX) :])
        return "" if value is None else str(value)
    return ""


def resolve_template(template: str, ctx: WorkflowContext | ContextSnapshot) -> str:
    return TEMPLATE_PATTERN.sub(lambda m: _lookup(m.group(1), ctx), template)


def template_variables(template: str) -> list[str]:
    """Variable paths referenced by `template`, in order of appearance."""

    return TEMPLATE_PATTERN.findall(template)


def is_known_variable(path: str) -> bool:
    return path in KNOWN_VARIABLES or (
        path.startswith(METADATA_PREFIX) and len(path) > len(METADATA_PREFIX)
    )
