from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


def count_words(text: str) -> int:
    return len(text.split())


@dataclass(slots=True)
class WorkflowContext:
    """Memory carried across the turns of one workflow activation.

    Created empty when a workflow activates and discarded when it exits.
    Handlers mutate it in place.
    """

    buffer: str = ""
    metadata: dict[str, object] = field(default_factory=dict)
    turn_count: int = 0
    state_turn_count: int = 0

    @property
    def word_count(self) -> int:
        return count_words(self.buffer)

    def snapshot(self) -> ContextSnapshot:
        return ContextSnapshot(
            buffer=self.buffer,
            metadata=MappingProxyType(dict(self.metadata)),
            turn_count=self.turn_count,
            state_turn_count=self.state_turn_count,
        )


@dataclass(frozen=True, slots=True)
class ContextSnapshot:
    """Read-only copy of a `WorkflowContext` at one point in time."""

    buffer: str = ""
    metadata: Mapping[str, object] = field(default_factory=lambda: MappingProxyType({}))
    turn_count: int = 0
    state_turn_count: int = 0

    @property
    def word_count(self) -> int:
        return count_words(self.buffer)

    def to_json(self) -> dict[str, object]:
        return {
            "buffer": self.buffer,
            "metadata": dict(self.metadata),
            "turnCount": self.turn_count,
            "stateTurnCount": self.state_turn_count,
        }
