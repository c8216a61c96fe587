"""Registry joining form element hashes to document nodes."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

    from .nodes import NodeRef

log = getLogger(__name__)


@dataclass(slots=True)
class NodeRegistry:
    """Authoritative record of which form positions already exist in a document.

    Create actions register the node they add; delete actions deregister it.
    Iteration order follows registration order.
    """

    _nodes: dict[str, NodeRef] = field(default_factory=dict["str", "NodeRef"], repr=False)

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, element_hash: object) -> bool:
        return element_hash in self._nodes

    def __iter__(self) -> Iterator[str]:
        return iter(tuple(self._nodes))

    def register(self, element_hash: str, node: NodeRef) -> None:
        previous = self._nodes.get(element_hash)
        if previous is not None and previous != node:
            log.debug("Re-registering %s to a different node", element_hash)
        self._nodes[element_hash] = node

    def unregister(self, element_hash: str) -> NodeRef | None:
        return self._nodes.pop(element_hash, None)

    def unregister_subtree(self, node: NodeRef) -> list[str]:
        """Drop every registration pointing at ``node`` or at a node below it."""

        if node.is_attribute:
            removed = [hash_ for hash_, ref in self._nodes.items() if ref == node]
        else:
            removed = [hash_ for hash_, ref in self._nodes.items() if ref.within(node.element)]
        for element_hash in removed:
            del self._nodes[element_hash]
        return removed

    def get(self, element_hash: str) -> NodeRef | None:
        return self._nodes.get(element_hash)

    def is_registered(self, element_hash: str) -> bool:
        return element_hash in self._nodes

    def hashes(self) -> tuple[str, ...]:
        return tuple(self._nodes)
