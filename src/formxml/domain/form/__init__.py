"""Form elements, their document actions and the reconciliation processor."""

from __future__ import annotations

from .actions import (
    ACTION_TYPES,
    Action,
    ActionContext,
    ActionPhase,
    ActionSet,
    CreateAction,
    CreateType,
    DeleteAction,
    ReadAction,
    UpdateAction,
    build_action,
)
from .builder import (
    REPEATABLE_CONTROL,
    FormBuild,
    add_instance,
    apply_submission,
    build_form,
    is_repeatable,
)
from .element import ElementRegistry, FormElement
from .processor import ProcessAction, ProcessReport, XMLFormProcessor
from .values import FormValues, is_empty, to_text

__all__ = [
    "ACTION_TYPES",
    "REPEATABLE_CONTROL",
    "Action",
    "ActionContext",
    "ActionPhase",
    "ActionSet",
    "CreateAction",
    "CreateType",
    "DeleteAction",
    "ElementRegistry",
    "FormBuild",
    "FormElement",
    "FormValues",
    "ProcessAction",
    "ProcessReport",
    "ReadAction",
    "UpdateAction",
    "XMLFormProcessor",
    "add_instance",
    "apply_submission",
    "build_action",
    "build_form",
    "is_empty",
    "is_repeatable",
    "to_text",
]
