"""Submitted values keyed by form element hash."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .element import FormElement


class _Instances(list[object]):
    """Values of repeated sibling instances gathered under one key."""


def is_empty(value: object) -> bool:
    """Return whether ``value`` carries nothing worth writing to a document."""

    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, Mapping):
        return all(is_empty(item) for item in value.values())
    if isinstance(value, (list, tuple, set, frozenset)):
        return all(is_empty(item) for item in value)
    return False


def to_text(value: object) -> str | None:
    """Render a scalar form value as XML text; containers have no text."""

    if value is None or isinstance(value, Mapping):
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return " ".join(text for item in value if (text := to_text(item)))
    return str(value)


@dataclass(slots=True)
class FormValues:
    """Value lookup for one submission.

    Elements without an explicit value that have children resolve to a
    mapping of their children's values by key. Elements the submission left
    out are marked untouched: they keep their defaults and are never deleted
    for being empty.
    """

    _values: dict[str, object] = field(default_factory=dict["str", "object"], repr=False)
    _untouched: set[str] = field(default_factory=set["str"], repr=False)

    def __contains__(self, element_hash: object) -> bool:
        return element_hash in self._values

    def set(self, element: FormElement, value: object) -> None:
        self._values[element.hash] = value

    def discard(self, element: FormElement) -> None:
        self._values.pop(element.hash, None)

    def mark_untouched(self, element: FormElement) -> None:
        self._untouched.add(element.hash)

    def is_untouched(self, element: FormElement) -> bool:
        if element.hash in self._untouched:
            return True
        if element.hash in self._values or not element.children:
            return False
        return all(self.is_untouched(child) for child in element.children)

    def get(self, element: FormElement) -> object:
        if element.hash in self._values:
            return self._values[element.hash]
        if not element.children:
            return None
        nested: dict[str, object] = {}
        for child in element.children:
            value = self.get(child)
            if child.key not in nested:
                nested[child.key] = value
                continue
            # Repeated instances share a key.
            existing = nested[child.key]
            if isinstance(existing, _Instances):
                existing.append(value)
            else:
                nested[child.key] = _Instances([existing, value])
        return nested

    def copy(self) -> FormValues:
        return FormValues(dict(self._values), set(self._untouched))
