"""Form element tree and the registry of every element built for a form."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .actions import ActionSet

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator


@dataclass(slots=True, eq=False, kw_only=True)
class FormElement:
    """One position in a submitted form.

    ``hash`` is the stable identity shared with the document's node registry.
    ``controls`` carries display flags; only ``access`` matters to reconciliation.
    """

    hash: str
    key: str
    controls: dict[str, object] = field(default_factory=dict["str", "object"])
    actions: ActionSet = field(default_factory=ActionSet)
    children: list[FormElement] = field(default_factory=list["FormElement"])
    parent: FormElement | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        for child in self.children:
            child.parent = self

    @property
    def access(self) -> bool | None:
        value = self.controls.get("access")
        return None if value is None else bool(value)

    @property
    def is_accessible(self) -> bool:
        return self.access is not False

    def add_child(self, child: FormElement) -> FormElement:
        child.parent = self
        self.children.append(child)
        return child

    def remove_child(self, child: FormElement) -> None:
        self.children.remove(child)
        child.parent = None

    def flatten(self) -> list[FormElement]:
        """Return this element followed by all descendants in pre-order."""

        flattened: list[FormElement] = []
        stack: list[FormElement] = [self]
        while stack:
            element = stack.pop()
            flattened.append(element)
            stack.extend(reversed(element.children))
        return flattened

    def find(self, *keys: str) -> FormElement | None:
        element: FormElement | None = self
        for key in keys:
            if element is None:
                return None
            element = next((child for child in element.children if child.key == key), None)
        return element

    def __iter__(self) -> Iterator[FormElement]:
        return iter(self.children)


@dataclass(slots=True)
class ElementRegistry:
    """Every element built for a form, keyed by hash.

    Elements stay registered after they leave the tree so a later pass can
    still run the delete action of a removed element.
    """

    _elements: dict[str, FormElement] = field(
        default_factory=dict["str", "FormElement"], repr=False
    )

    def __len__(self) -> int:
        return len(self._elements)

    def __contains__(self, element_hash: object) -> bool:
        return element_hash in self._elements

    def register(self, element: FormElement) -> None:
        self._elements[element.hash] = element

    def register_all(self, elements: Iterable[FormElement]) -> None:
        for element in elements:
            self.register(element)

    def register_tree(self, root: FormElement) -> None:
        self.register_all(root.flatten())

    def get(self, element_hash: str) -> FormElement | None:
        return self._elements.get(element_hash)

    def hashes(self) -> tuple[str, ...]:
        return tuple(self._elements)
