"""Document mutations bound to form elements.

Each action belongs to exactly one phase. The processor asks an action whether
it ``should_execute`` against the current document and submitted value, then
calls ``execute``, which reports whether the document was changed. A create
that returns ``False`` is retried after other creates have run.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, ClassVar, Protocol, runtime_checkable

from lxml import etree

from formxml.domain.document import NodeRef

from .values import is_empty, to_text

if TYPE_CHECKING:
    from formxml.domain.document import XMLDocument

    from .element import FormElement

VALUE_PLACEHOLDER = "%value%"


class ActionPhase(StrEnum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


class ActionContext(StrEnum):
    """Node an action's ``path`` is evaluated against."""

    PARENT = "parent"
    SELF = "self"
    DOCUMENT = "document"


class CreateType(StrEnum):
    ELEMENT = "element"
    ATTRIBUTE = "attribute"
    XML = "xml"


@runtime_checkable
class Action(Protocol):
    @property
    def phase(self) -> ActionPhase: ...

    def should_execute(
        self, document: XMLDocument, element: FormElement, value: object
    ) -> bool: ...

    def execute(self, document: XMLDocument, element: FormElement, value: object) -> bool: ...


def context_node(
    document: XMLDocument,
    element: FormElement,
    context: ActionContext,
) -> etree._Element | None:
    """Resolve the element an action works relative to, or ``None`` if it does not exist yet.

    For ``PARENT`` the nearest ancestor that owns document nodes is used;
    ancestors with neither a create nor a read action only group fields and
    are skipped.
    """

    if context is ActionContext.DOCUMENT:
        return document.root
    if context is ActionContext.SELF:
        return _registered_element(document, element)

    ancestor = element.parent
    while ancestor is not None:
        if _owns_node(ancestor) or document.registry.is_registered(ancestor.hash):
            return _registered_element(document, ancestor)
        ancestor = ancestor.parent
    return document.root


def as_node_ref(result: object) -> NodeRef | None:
    """Convert one XPath result into a node reference."""

    if isinstance(result, etree._Element):
        return NodeRef(result)
    if isinstance(result, etree._ElementUnicodeResult):
        owner = result.getparent()
        if owner is None:
            return None
        if result.is_attribute:
            return NodeRef(owner, str(result.attrname))
        return NodeRef(owner)
    return None


def _owns_node(element: FormElement) -> bool:
    return element.actions.create is not None or element.actions.read is not None


def _registered_element(document: XMLDocument, element: FormElement) -> etree._Element | None:
    node = document.registry.get(element.hash)
    if node is None or node.is_attribute:
        return None
    return node.element


@dataclass(slots=True, frozen=True, kw_only=True)
class CreateAction:
    """Add a node for the element below its context and register it."""

    phase: ClassVar[ActionPhase] = ActionPhase.CREATE

    node_type: CreateType = CreateType.ELEMENT
    context: ActionContext = ActionContext.PARENT
    path: str | None = None
    name: str | None = None
    xml: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "node_type", CreateType(self.node_type))
        object.__setattr__(self, "context", ActionContext(self.context))
        if self.node_type is CreateType.XML:
            if not self.xml:
                raise ValueError("XML create actions require an xml snippet")
        elif not self.name:
            raise ValueError(f"{self.node_type} create actions require a name")

    def should_execute(self, document: XMLDocument, element: FormElement, value: object) -> bool:
        return not document.registry.is_registered(element.hash) and not is_empty(value)

    def execute(self, document: XMLDocument, element: FormElement, value: object) -> bool:
        parent = self._insertion_parent(document, element)
        if parent is None:
            return False
        node = self._create(document, parent, value)
        document.registry.register(element.hash, node)
        return True

    def _insertion_parent(
        self, document: XMLDocument, element: FormElement
    ) -> etree._Element | None:
        context = context_node(document, element, self.context)
        if context is None or self.path is None:
            return context
        matches = document.select_elements(self.path, context)
        return matches[0] if matches else None

    def _create(self, document: XMLDocument, parent: etree._Element, value: object) -> NodeRef:
        text = to_text(value)
        if self.node_type is CreateType.ATTRIBUTE:
            name = document.qualify(self.name or "")
            parent.set(name, text or "")
            return NodeRef(parent, name)
        if self.node_type is CreateType.XML:
            fragment = document.parse_fragment(self.xml or "")
            _fill_placeholders(fragment, text or "")
            parent.append(fragment)
            return NodeRef(fragment)
        child = etree.SubElement(parent, document.qualify(self.name or ""))
        if text:
            child.text = text
        return NodeRef(child)


@dataclass(slots=True, frozen=True, kw_only=True)
class ReadAction:
    """Find existing nodes for an element when a form is built from a document."""

    phase: ClassVar[ActionPhase] = ActionPhase.READ

    path: str
    context: ActionContext = ActionContext.PARENT

    def __post_init__(self) -> None:
        object.__setattr__(self, "context", ActionContext(self.context))

    def select(self, document: XMLDocument, element: FormElement) -> list[NodeRef]:
        context = context_node(document, element, self.context)
        if context is None:
            return []
        nodes: list[NodeRef] = []
        for result in document.xpath(self.path, context):
            node = as_node_ref(result)
            if node is not None:
                nodes.append(node)
        return nodes

    def should_execute(self, document: XMLDocument, element: FormElement, value: object) -> bool:
        return not document.registry.is_registered(element.hash)

    def execute(self, document: XMLDocument, element: FormElement, value: object) -> bool:
        nodes = self.select(document, element)
        if not nodes:
            return False
        document.registry.register(element.hash, nodes[0])
        return True


@dataclass(slots=True, frozen=True, kw_only=True)
class UpdateAction:
    """Overwrite the value of the element's registered node.

    ``path`` optionally selects a node or attribute relative to it.
    """

    phase: ClassVar[ActionPhase] = ActionPhase.UPDATE

    path: str | None = None

    def should_execute(self, document: XMLDocument, element: FormElement, value: object) -> bool:
        if isinstance(value, Mapping) or is_empty(value):
            return False
        target = self._target(document, element)
        return target is not None and target.value != to_text(value)

    def execute(self, document: XMLDocument, element: FormElement, value: object) -> bool:
        target = self._target(document, element)
        if target is None:
            return False
        target.set_value(to_text(value))
        return True

    def _target(self, document: XMLDocument, element: FormElement) -> NodeRef | None:
        node = document.registry.get(element.hash)
        if node is None or self.path is None:
            return node
        if node.is_attribute:
            return None
        for result in document.xpath(self.path, node.element):
            target = as_node_ref(result)
            if target is not None:
                return target
        return None


@dataclass(slots=True, frozen=True, kw_only=True)
class DeleteAction:
    """Remove the element's registered node and everything registered below it."""

    phase: ClassVar[ActionPhase] = ActionPhase.DELETE

    def should_execute(self, document: XMLDocument, element: FormElement, value: object) -> bool:
        return document.registry.is_registered(element.hash) and is_empty(value)

    def execute(self, document: XMLDocument, element: FormElement, value: object) -> bool:
        node = document.registry.unregister(element.hash)
        if node is None:
            return False
        document.registry.unregister_subtree(node)
        return node.detach()


@dataclass(slots=True, kw_only=True)
class ActionSet:
    """The optional per-phase actions of one form element."""

    create: Action | None = None
    read: ReadAction | None = None
    update: Action | None = None
    delete: Action | None = None

    def for_phase(self, phase: ActionPhase) -> Action | None:
        match phase:
            case ActionPhase.CREATE:
                return self.create
            case ActionPhase.READ:
                return self.read
            case ActionPhase.UPDATE:
                return self.update
            case ActionPhase.DELETE:
                return self.delete

    @classmethod
    def build(cls, definitions: Mapping[str, Mapping[str, object]]) -> ActionSet:
        actions: dict[ActionPhase, Action] = {}
        for kind, params in definitions.items():
            action = build_action(kind, params)
            actions[action.phase] = action
        read = actions.get(ActionPhase.READ)
        return cls(
            create=actions.get(ActionPhase.CREATE),
            read=read if isinstance(read, ReadAction) else None,
            update=actions.get(ActionPhase.UPDATE),
            delete=actions.get(ActionPhase.DELETE),
        )


ACTION_TYPES: dict[str, Callable[..., Action]] = {
    ActionPhase.CREATE: CreateAction,
    ActionPhase.READ: ReadAction,
    ActionPhase.UPDATE: UpdateAction,
    ActionPhase.DELETE: DeleteAction,
}


def build_action(kind: str, params: Mapping[str, object]) -> Action:
    factory = ACTION_TYPES.get(kind)
    if factory is None:
        raise ValueError(f"Unknown action kind: {kind}")
    return factory(**params)


def _fill_placeholders(fragment: etree._Element, text: str) -> None:
    for node in fragment.iter(etree.Element):
        if node.text and VALUE_PLACEHOLDER in node.text:
            node.text = node.text.replace(VALUE_PLACEHOLDER, text)
        if node.tail and VALUE_PLACEHOLDER in node.tail:
            node.tail = node.tail.replace(VALUE_PLACEHOLDER, text)
        for name, attribute in node.attrib.items():
            if VALUE_PLACEHOLDER in attribute:
                node.set(name, attribute.replace(VALUE_PLACEHOLDER, text))
