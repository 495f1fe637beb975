"""CLI entrypoint for checking and exercising workflow definitions."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from pydantic import ValidationError

from turnflow import __version__
from turnflow.config import EngineSettings, create_engine
from turnflow.logging import configure_logging
from turnflow.workflow.registry import DefinitionLoadError, WorkflowRegistry, check_definition

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="turnflow",
        description="Declarative multi-turn conversational workflow engine",
    )
    parser.add_argument("--version", action="version", version=f"turnflow {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    validate = subparsers.add_parser(
        "validate",
        help="Load definition files and report authoring problems",
    )
    validate.add_argument("files", nargs="+", type=Path, help="Newline-delimited JSON files")
    validate.add_argument(
        "--strict",
        action="store_true",
        help="Exit non-zero when any definition has diagnostics",
    )

    replay = subparsers.add_parser(
        "replay",
        help="Feed a transcript of classified inputs through the engine",
    )
    replay.add_argument(
        "script",
        type=Path,
        help='Newline-delimited JSON transcript of {"text": ..., "intent": ...} objects',
    )
    replay.add_argument(
        "--definitions",
        action="append",
        type=Path,
        default=[],
        help="Extra definitions file to load (repeatable)",
    )
    replay.add_argument(
        "--no-builtins",
        action="store_true",
        help="Do not load the workflow definitions shipped with the package",
    )

    return parser


def _cmd_validate(args: argparse.Namespace) -> int:
    registry = WorkflowRegistry()
    for path in args.files:
        try:
            registry.load_file(path)
        except DefinitionLoadError as e:
            print(f"{path}: {e}", file=sys.stderr)
            return 1

    has_problems = False
    for workflow_id in registry.ids():
        definition = registry.get(workflow_id)
        assert definition is not None
        problems = check_definition(definition)
        if not problems:
            print(f"{workflow_id}: ok")
            continue
        has_problems = True
        for problem in problems:
            print(f"{workflow_id}: {problem}")

    return 2 if has_problems and args.strict else 0


def _read_script(path: Path) -> list[tuple[str, str]]:
    inputs: list[tuple[str, str]] = []
    for lineno, line in enumerate(path.read_text(encoding="utf-8").splitlines(), start=1):
        if not line.strip():
            continue
        raw = json.loads(line)
        if not isinstance(raw, dict) or not isinstance(raw.get("text"), str):
            raise ValueError(f"{path} line {lineno}: expected an object with a 'text' string")
        intent = raw.get("intent", "unknown")
        inputs.append((raw["text"], str(intent)))
    return inputs


def _cmd_replay(args: argparse.Namespace, settings: EngineSettings) -> int:
    if args.no_builtins:
        settings = settings.model_copy(update={"load_builtin_definitions": False})
    try:
        engine = create_engine(settings)
        for path in args.definitions:
            engine.load_file(path)
        inputs = _read_script(args.script)
    except (DefinitionLoadError, OSError, ValueError) as e:
        print(str(e), file=sys.stderr)
        return 1

    for text, intent in inputs:
        result = engine.handle_input(text, intent)
        print(json.dumps({"text": text, "intent": intent, **result.to_json()}, ensure_ascii=False))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = EngineSettings()
    except ValidationError as e:
        print(str(e), file=sys.stderr)
        return 1

    configure_logging(settings.log_level, settings.log_format)
    logger.debug("Running command", extra={"command": args.command})

    if args.command == "validate":
        return _cmd_validate(args)
    if args.command == "replay":
        return _cmd_replay(args, settings)

    parser.error(f"Unknown command: {args.command}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
