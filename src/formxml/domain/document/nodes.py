"""References to nodes inside an XML document.

lxml exposes attributes as plain strings rather than node objects, so a
registered node is an owning element plus an optional attribute name.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lxml import etree


@dataclass(slots=True, frozen=True)
class NodeRef:
    """Handle on one element or one attribute of an element."""

    element: etree._Element
    attribute: str | None = None

    @property
    def is_attribute(self) -> bool:
        return self.attribute is not None

    @property
    def value(self) -> str | None:
        if self.attribute is not None:
            return self.element.get(self.attribute)
        return self.element.text

    def set_value(self, value: str | None) -> None:
        if self.attribute is not None:
            self.element.set(self.attribute, value or "")
            return
        self.element.text = value

    def detach(self) -> bool:
        """Remove the node from its document; ``False`` when there is nothing to remove."""

        if self.attribute is not None:
            if self.attribute not in self.element.attrib:
                return False
            del self.element.attrib[self.attribute]
            return True
        parent = self.element.getparent()
        if parent is None:
            return False
        tail = self.element.tail
        previous = self.element.getprevious()
        parent.remove(self.element)
        if tail and tail.strip():
            if previous is not None:
                previous.tail = (previous.tail or "") + tail
            else:
                parent.text = (parent.text or "") + tail
        return True

    def within(self, ancestor: etree._Element) -> bool:
        if self.element is ancestor:
            return True
        return any(node is ancestor for node in self.element.iterancestors())
