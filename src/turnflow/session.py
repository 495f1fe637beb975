"""Host-side composition of an intent classifier and a workflow engine.

The engine only sees `(text, intent)` pairs. A session owns the step before
that: trimming input, deciding whether classification is needed at all, and
reporting what happened so the host can fall through when the engine did not
consume the input.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from turnflow.workflow.actions import HandleResult, WorkflowAction
from turnflow.workflow.engine import WorkflowEngine

logger = logging.getLogger(__name__)

UNKNOWN_INTENT = "unknown"


@dataclass(frozen=True, slots=True)
class Classification:
    intent: str
    score: float = 0.0


class IntentClassifier(Protocol):
    """Maps raw text to an intent label; ``"unknown"`` when nothing matches."""

    def classify(self, text: str) -> Classification: ...


@dataclass(frozen=True, slots=True)
class SessionTurn:
    text: str
    intent: str
    score: float
    result: HandleResult
    classifier_bypassed: bool = False

    @property
    def consumed(self) -> bool:
        return self.result.consumed

    @property
    def action(self) -> WorkflowAction | None:
        return self.result.action


class WorkflowSession:
    def __init__(self, engine: WorkflowEngine, classifier: IntentClassifier) -> None:
        self.engine = engine
        self.classifier = classifier

    def process(self, text: str) -> SessionTurn | None:
        """Route one utterance through the engine.

        Returns None for blank input. While the active state is a pure capture
        state the classifier is skipped, since every utterance is content.
        """

        trimmed = text.strip()
        if not trimmed:
            return None

        if self.engine.is_active() and self.engine.is_capturing():
            result = self.engine.handle_input(trimmed, UNKNOWN_INTENT)
            return SessionTurn(
                text=trimmed,
                intent=UNKNOWN_INTENT,
                score=0.0,
                result=result,
                classifier_bypassed=True,
            )

        classification = self.classifier.classify(trimmed)
        result = self.engine.handle_input(trimmed, classification.intent)
        if not result.consumed:
            logger.debug(
                "Input not consumed by workflow engine",
                extra={"intent": classification.intent},
            )
        return SessionTurn(
            text=trimmed,
            intent=classification.intent,
            score=classification.score,
            result=result,
        )
