"""Workflow registry and batch loading of definition records."""

from __future__ import annotations

import json
import logging
from importlib import resources
from pathlib import Path

from pydantic import ValidationError

from .definitions import WorkflowDefinition, WorkflowRecord
from .templates import is_known_variable, template_variables

logger = logging.getLogger(__name__)


class DefinitionLoadError(ValueError):
    """A definitions batch could not be parsed; nothing from it was registered."""

    def __init__(self, message: str, *, line: int | None = None) -> None:
        self.line = line
        prefix = f"line {line}: " if line is not None else ""
        super().__init__(prefix + message)


def parse_batch(text: str) -> list[WorkflowDefinition]:
    """Parse newline-delimited JSON records into definitions.

    Blank lines are skipped. The first malformed line raises
    `DefinitionLoadError`.
    """

    definitions: list[WorkflowDefinition] = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        try:
            raw = json.loads(line)
        except json.JSONDecodeError as e:
            raise DefinitionLoadError(f"invalid JSON: {e.msg}", line=lineno) from e
        if not isinstance(raw, dict):
            raise DefinitionLoadError("expected a JSON object", line=lineno)
        try:
            definitions.append(WorkflowRecord.model_validate(raw).to_definition())
        except ValidationError as e:
            raise DefinitionLoadError(f"invalid workflow record: {e}", line=lineno) from e
    return definitions


class WorkflowRegistry:
    """Workflow definitions keyed by id, in registration order."""

    def __init__(self) -> None:
        self._definitions: dict[str, WorkflowDefinition] = {}

    def register(self, definition: WorkflowDefinition) -> None:
        # Overwriting keeps the original position, so trigger precedence is stable.
        replaced = definition.id in self._definitions
        self._definitions[definition.id] = definition
        logger.debug(
            "Registered workflow",
            extra={"workflow_id": definition.id, "replaced": replaced},
        )

    def get(self, workflow_id: str) -> WorkflowDefinition | None:
        return self._definitions.get(workflow_id)

    def ids(self) -> list[str]:
        return list(self._definitions)

    def find_by_trigger(self, intent: str) -> WorkflowDefinition | None:
        for definition in self._definitions.values():
            if definition.trigger_intent == intent:
                return definition
        return None

    def should_trigger(self, intent: str) -> bool:
        return self.find_by_trigger(intent) is not None

    def load_batch(self, text: str) -> list[str]:
        """Register every record in `text`, or none of them."""

        definitions = parse_batch(text)
        for definition in definitions:
            self.register(definition)
        ids = [d.id for d in definitions]
        logger.info("Loaded workflow definitions", extra={"workflow_ids": ids})
        return ids

    def load_file(self, path: Path) -> list[str]:
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise DefinitionLoadError(f"cannot read {path}: {e}") from e
        return self.load_batch(text)

    def __contains__(self, workflow_id: object) -> bool:
        return workflow_id in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)


def builtin_definitions_path() -> Path:
    """Path of the definitions file shipped with the package."""

    return Path(str(resources.files("turnflow") / "data" / "workflows.jsonl"))


def check_definition(definition: WorkflowDefinition) -> list[str]:
    """Advisory authoring checks.

    The engine tolerates every problem reported here at run time (dangling
    targets exit, unknown variables render empty); this only surfaces them
    earlier.
    """

    problems: list[str] = []
    if definition.state(definition.initial_state) is None:
        problems.append(f"initial state {definition.initial_state!r} is not defined")

    templates = [("exitMessage", definition.exit_message)]
    for key, state in definition.states.items():
        if state.id != key:
            problems.append(f"state {key!r} declares id {state.id!r}")
        templates.append((f"{key}.onEnter", state.on_enter))

        targets = [(f"{key}.transitions[{intent!r}]", t) for intent, t in state.transitions.items()]
        if state.has_turn_cap:
            targets.append((f"{key}.maxTurnsTarget", state.max_turns_target))
        for where, target in targets:
            if not target.is_exit and definition.state(target.state_id) is None:
                problems.append(f"{where} points at undefined state {target.state_id!r}")
            if target.message is not None:
                templates.append((where, target.message))

    for where, template in templates:
        for variable in template_variables(template):
            if not is_known_variable(variable):
                problems.append(f"{where} uses unknown template variable {variable!r}")
    return problems
