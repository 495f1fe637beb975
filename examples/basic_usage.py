#!/usr/bin/env python3
"""Drive the packaged transcribe workflow from the command line.

This demonstrates using the runtime components directly:

* load settings from `.env`
* build an engine with the packaged definitions
* route utterances through a session with a tiny keyword classifier

Each argument is one utterance, e.g.:

    python examples/basic_usage.py "transcribe mode" yes "hello world" "stop transcribe"
"""

from __future__ import annotations

import argparse
from typing import Sequence

from turnflow import Classification, EngineSettings, WorkflowSession, create_engine
from turnflow.logging import configure_logging
from turnflow.workflow import ActionType, WorkflowAction

KEYWORDS: dict[str, tuple[str, ...]] = {
    "transcribe": ("transcribe", "dictate"),
    "confirm": ("yes", "go ahead", "sure"),
    "deny": ("no", "cancel"),
}


class KeywordClassifier:
    def classify(self, text: str) -> Classification:
        words = text.lower()
        for intent, keywords in KEYWORDS.items():
            if any(keyword in words for keyword in keywords):
                return Classification(intent=intent, score=1.0)
        return Classification(intent="unknown")


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run utterances through the transcribe workflow.")
    parser.add_argument("utterances", nargs="+", help="User utterances, in order")
    return parser.parse_args(argv)


def _print_action(action: WorkflowAction) -> None:
    print(f"[{action.type.value}] {getattr(action, 'message', '')}")


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = EngineSettings()
    configure_logging(settings.log_level, settings.log_format)

    engine = create_engine(settings)
    for event in ActionType:
        engine.on(event, _print_action)

    session = WorkflowSession(engine, KeywordClassifier())
    for utterance in args.utterances:
        turn = session.process(utterance)
        if turn is not None and not turn.consumed:
            print(f"(not consumed, intent={turn.intent}): {turn.text}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
