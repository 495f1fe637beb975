"""Configuration for the workflow runtime.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

All variables use the `TURNFLOW_` prefix.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from turnflow.workflow.engine import WorkflowEngine
from turnflow.workflow.registry import builtin_definitions_path

logger = logging.getLogger(__name__)

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class EngineSettings(BaseSettings):
    """Settings for building a workflow engine.

    Environment variables:
    - TURNFLOW_LOG_LEVEL         (optional)
    - TURNFLOW_LOG_FORMAT        (optional, "json" or "text")
    - TURNFLOW_DEFINITIONS_PATH  (optional)
    - TURNFLOW_LOAD_BUILTINS     (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `EngineSettings(_env_file=path_to_env)`.
    """

    log_level: str = Field(
        default="INFO",
        validation_alias="TURNFLOW_LOG_LEVEL",
        description="Root logging level",
    )
    log_format: Literal["json", "text"] = Field(
        default="json",
        validation_alias="TURNFLOW_LOG_FORMAT",
        description="Log output format",
    )
    definitions_path: Path | None = Field(
        default=None,
        validation_alias="TURNFLOW_DEFINITIONS_PATH",
        description="Newline-delimited JSON file of workflow definitions to load at startup",
    )
    load_builtin_definitions: bool = Field(
        default=True,
        validation_alias="TURNFLOW_LOAD_BUILTINS",
        description="Load the workflow definitions shipped with the package",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level: {value!r}")
        return level


def create_engine(settings: EngineSettings | None = None) -> WorkflowEngine:
    """Build an engine and load the configured definitions.

    Raises:
        DefinitionLoadError: If a definitions file is malformed.
    """

    settings = settings or EngineSettings()
    engine = WorkflowEngine()
    if settings.load_builtin_definitions:
        engine.load_file(builtin_definitions_path())
    if settings.definitions_path is not None:
        engine.load_file(settings.definitions_path)
    logger.info("Workflow engine ready", extra={"workflow_ids": engine.registry.ids()})
    return engine
