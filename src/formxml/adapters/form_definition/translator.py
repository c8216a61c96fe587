"""Translate form definitions into template element trees."""

from __future__ import annotations

from typing import TYPE_CHECKING

from formxml.domain.form import REPEATABLE_CONTROL, ActionSet, FormElement

if TYPE_CHECKING:
    from .schema import ActionsDefinition, ElementDefinition, FormDefinition


def translate_form(definition: FormDefinition) -> FormElement:
    """Return the template tree for ``definition``; its root stands for the document root."""

    root = FormElement(
        hash=definition.name,
        key=definition.name,
        controls={"type": "form", "title": definition.name},
    )
    for element in definition.elements:
        root.add_child(translate_element(element, parent_hash=root.hash))
    return root


def translate_element(definition: ElementDefinition, *, parent_hash: str) -> FormElement:
    element_hash = f"{parent_hash}/{definition.key}"
    element = FormElement(
        hash=element_hash,
        key=definition.key,
        controls=_controls(definition),
        actions=_actions(definition.actions),
    )
    for child in definition.children:
        element.add_child(translate_element(child, parent_hash=element_hash))
    return element


def _controls(definition: ElementDefinition) -> dict[str, object]:
    controls: dict[str, object] = {"type": definition.type}
    if definition.title is not None:
        controls["title"] = definition.title
    if definition.access is not None:
        controls["access"] = definition.access
    if definition.repeatable:
        controls[REPEATABLE_CONTROL] = True
    return controls


def _actions(definition: ActionsDefinition) -> ActionSet:
    return ActionSet.build(
        {
            kind: params.model_dump(exclude_none=True)
            for kind, params in (
                ("create", definition.create),
                ("read", definition.read),
                ("update", definition.update),
                ("delete", definition.delete),
            )
            if params is not None
        }
    )
