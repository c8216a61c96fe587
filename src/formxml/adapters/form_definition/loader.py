"""Load form definitions and submissions from JSON files."""

from __future__ import annotations

import json
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from .schema import FormDefinition

if TYPE_CHECKING:
    from pathlib import Path

log = getLogger(__name__)


class FormDefinitionError(ValueError):
    """Raised when a form definition or submission cannot be loaded."""


def parse_form_definition(payload: str | bytes) -> FormDefinition:
    try:
        return FormDefinition.model_validate_json(payload)
    except ValidationError as exc:
        raise FormDefinitionError(f"Invalid form definition: {exc}") from exc


def load_form_definition(path: Path) -> FormDefinition:
    log.debug("Loading form definition from %s", path)
    return parse_form_definition(path.read_bytes())


def load_submission(path: Path) -> dict[str, object]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise FormDefinitionError(f"Invalid submission JSON in {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise FormDefinitionError(f"Submission in {path} must be a JSON object")
    return payload
