"""Specwright JSON Schema definitions and validation utilities.

This module provides JSON Schema definitions for the records specwright
persists and the configuration file it reads.

Schemas:
    - project_status.schema.json: Per-project phase progression record
    - sessions.schema.json: Per-project agent session record
    - config.schema.json: Optional specwright.json configuration

Usage:
    from specwright.schemas import validate_project_status

    with open("project_status.json") as f:
        data = json.load(f)
    validate_project_status(data)  # Raises jsonschema.ValidationError if invalid
"""

from __future__ import annotations

import json
from importlib.resources import files
from typing import Any

import jsonschema


def _load_schema(name: str) -> dict[str, Any]:
    """Load a JSON schema from the schemas package.

    Args:
        name: Schema filename (e.g., 'sessions.schema.json')

    Returns:
        Parsed JSON schema as a dictionary
    """
    schema_text = files("specwright.schemas").joinpath(name).read_text()
    result: dict[str, Any] = json.loads(schema_text)
    return result


def get_project_status_schema() -> dict[str, Any]:
    """Get the project_status.json schema."""
    return _load_schema("project_status.schema.json")


def get_sessions_schema() -> dict[str, Any]:
    """Get the sessions.json schema."""
    return _load_schema("sessions.schema.json")


def get_config_schema() -> dict[str, Any]:
    """Get the specwright.json configuration schema."""
    return _load_schema("config.schema.json")


def validate_project_status(data: dict[str, Any]) -> None:
    """Validate a project status record against the schema.

    Args:
        data: Decoded project_status.json

    Raises:
        jsonschema.ValidationError: If validation fails
    """
    jsonschema.validate(data, get_project_status_schema())


def validate_sessions(data: dict[str, Any]) -> None:
    """Validate a session record against the schema.

    Args:
        data: Decoded sessions.json

    Raises:
        jsonschema.ValidationError: If validation fails
    """
    jsonschema.validate(data, get_sessions_schema())


def validate_config(data: dict[str, Any]) -> None:
    """Validate a configuration file against the schema.

    Args:
        data: Decoded specwright.json

    Raises:
        jsonschema.ValidationError: If validation fails
    """
    jsonschema.validate(data, get_config_schema())


__all__ = [
    "get_project_status_schema",
    "get_sessions_schema",
    "get_config_schema",
    "validate_project_status",
    "validate_sessions",
    "validate_config",
]
