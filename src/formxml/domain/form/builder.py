"""Build form element trees from templates and an existing document.

A template is a ``FormElement`` tree describing the form once. Building it
against a document creates the concrete instances: repeatable templates get one
instance per node their read action finds, each instance's node is registered
under the instance hash and leaf values become the form defaults.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from formxml.domain.document import NodeRef

from .element import ElementRegistry, FormElement
from .values import FormValues

if TYPE_CHECKING:
    from formxml.domain.document import XMLDocument

log = getLogger(__name__)

REPEATABLE_CONTROL = "repeatable"


def is_repeatable(element: FormElement) -> bool:
    return bool(element.controls.get(REPEATABLE_CONTROL, False))


@dataclass(slots=True)
class FormBuild:
    """Concrete form built from a template against one document."""

    root: FormElement
    document: XMLDocument
    elements: ElementRegistry = field(default_factory=ElementRegistry)
    defaults: FormValues = field(default_factory=FormValues)
    templates: dict[str, FormElement] = field(
        default_factory=dict["str", "FormElement"], repr=False
    )

    def template_for(self, element: FormElement) -> FormElement:
        return self.templates[element.hash]


def build_form(template: FormElement, document: XMLDocument) -> FormBuild:
    """Instantiate ``template`` and register the nodes ``document`` already holds."""

    root = FormElement(
        hash=template.key,
        key=template.key,
        controls=dict(template.controls),
        actions=template.actions,
    )
    build = FormBuild(root=root, document=document)
    build.templates[root.hash] = template
    build.elements.register(root)
    document.registry.register(root.hash, NodeRef(document.root))

    _build_children(build, root, template)
    log.debug("Built form %s with %s element(s)", root.hash, len(build.elements))
    return build


def apply_submission(build: FormBuild, submitted: Mapping[str, object]) -> FormValues:
    """Map a nested submission onto ``build.root`` and return the values by hash.

    Repeatable elements take a list with one entry per instance; instances
    beyond the list are removed from the tree but stay in the element registry.
    Keys missing from the submission keep their defaults and are marked
    untouched, so an empty default is left in the document.
    """

    values = FormValues()
    _assign_children(build, build.root, submitted, values)
    return values


def add_instance(build: FormBuild, parent: FormElement, template: FormElement) -> FormElement:
    """Append a fresh instance of a repeatable ``template`` below ``parent``."""

    index = sum(1 for child in parent.children if child.key == template.key)
    element_hash = _instance_hash(parent, template, index)
    while element_hash in build.elements:
        index += 1
        element_hash = _instance_hash(parent, template, index)
    instance = _instantiate(build, parent, template, element_hash)
    _build_children(build, instance, template)
    return instance


def _build_children(build: FormBuild, parent: FormElement, template: FormElement) -> None:
    for child_template in template.children:
        if is_repeatable(child_template):
            _build_repeatable(build, parent, child_template)
            continue
        element_hash = _instance_hash(parent, child_template)
        element = _instantiate(build, parent, child_template, element_hash)
        _read(build, element, child_template)
        _build_children(build, element, child_template)


def _build_repeatable(build: FormBuild, parent: FormElement, template: FormElement) -> None:
    first = _instantiate(build, parent, template, _instance_hash(parent, template, 0))
    read = template.actions.read
    nodes = read.select(build.document, first) if read is not None else []

    instances = [first]
    for index in range(1, len(nodes)):
        instances.append(
            _instantiate(build, parent, template, _instance_hash(parent, template, index))
        )
    for instance, node in zip(instances, nodes, strict=False):
        _register(build, instance, node)
    for instance in instances:
        _build_children(build, instance, template)


def _instantiate(
    build: FormBuild,
    parent: FormElement,
    template: FormElement,
    element_hash: str,
) -> FormElement:
    element = FormElement(
        hash=element_hash,
        key=template.key,
        controls=dict(template.controls),
        actions=template.actions,
    )
    parent.add_child(element)
    build.templates[element.hash] = template
    build.elements.register(element)
    return element


def _read(build: FormBuild, element: FormElement, template: FormElement) -> None:
    read = template.actions.read
    if read is None:
        return
    nodes = read.select(build.document, element)
    if nodes:
        _register(build, element, nodes[0])


def _register(build: FormBuild, element: FormElement, node: NodeRef) -> None:
    build.document.registry.register(element.hash, node)
    if not build.templates[element.hash].children:
        build.defaults.set(element, node.value)


def _instance_hash(parent: FormElement, template: FormElement, index: int | None = None) -> str:
    element_hash = f"{parent.hash}/{template.key}"
    return element_hash if index is None else f"{element_hash}[{index}]"


def _assign_children(
    build: FormBuild,
    parent: FormElement,
    submitted: Mapping[str, object],
    values: FormValues,
) -> None:
    template = build.template_for(parent)
    for child_template in template.children:
        instances = [child for child in parent.children if child.key == child_template.key]
        if child_template.key not in submitted:
            for instance in instances:
                _keep_defaults(build, instance, values)
            continue

        submitted_value = submitted[child_template.key]
        if not is_repeatable(child_template):
            for instance in instances:
                _assign(build, instance, submitted_value, values)
            continue

        items = _as_items(submitted_value)
        while len(instances) > len(items):
            removed = instances.pop()
            parent.remove_child(removed)
        while len(instances) < len(items):
            instances.append(add_instance(build, parent, child_template))
        for instance, item in zip(instances, items, strict=True):
            _assign(build, instance, item, values)


def _assign(
    build: FormBuild,
    element: FormElement,
    submitted_value: object,
    values: FormValues,
) -> None:
    if not build.template_for(element).children:
        values.set(element, submitted_value)
        return
    nested = submitted_value if isinstance(submitted_value, Mapping) else {}
    _assign_children(build, element, nested, values)


def _keep_defaults(build: FormBuild, element: FormElement, values: FormValues) -> None:
    for descendant in element.flatten():
        values.mark_untouched(descendant)
        if descendant.hash in build.defaults:
            values.set(descendant, build.defaults.get(descendant))


def _as_items(value: object) -> list[object]:
    if value is None:
        return []
    if isinstance(value, Sequence) and not isinstance(value, str):
        return list(value)
    return [value]
