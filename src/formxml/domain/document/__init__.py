"""XML documents and the node registry shared with form reconciliation."""

from __future__ import annotations

from .document import DocumentError, XMLDocument
from .nodes import NodeRef
from .registry import NodeRegistry

__all__ = [
    "DocumentError",
    "NodeRef",
    "NodeRegistry",
    "XMLDocument",
]
