"""turnflow.

A runtime engine for declarative, multi-turn conversational workflows:
- workflow definitions loaded from newline-delimited JSON
- an intent-driven state machine with per-activation memory
- settings loaded from `.env` and structured logging
"""

__version__ = "0.1.0"

from turnflow.config import EngineSettings, create_engine
from turnflow.session import Classification, IntentClassifier, SessionTurn, WorkflowSession
from turnflow.workflow.engine import WorkflowEngine

__all__ = [
    "__version__",
    "Classification",
    "EngineSettings",
    "IntentClassifier",
    "SessionTurn",
    "WorkflowEngine",
    "WorkflowSession",
    "create_engine",
]
