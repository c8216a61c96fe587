"""Public interface for JSON form definitions."""

from __future__ import annotations

from .loader import (
    FormDefinitionError,
    load_form_definition,
    load_submission,
    parse_form_definition,
)
from .schema import ElementDefinition, FormDefinition
from .translator import translate_element, translate_form

__all__ = [
    "ElementDefinition",
    "FormDefinition",
    "FormDefinitionError",
    "load_form_definition",
    "load_submission",
    "parse_form_definition",
    "translate_element",
    "translate_form",
]
