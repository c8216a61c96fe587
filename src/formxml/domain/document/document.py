"""XML document targeted by form reconciliation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from lxml import etree

from .registry import NodeRegistry

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

_FRAGMENT_WRAPPER = "formxml-fragment"


class DocumentError(ValueError):
    """Raised when a document, fragment or XPath expression cannot be used."""


def _parser() -> etree.XMLParser:
    return etree.XMLParser(remove_blank_text=True, resolve_entities=False, no_network=True)


@dataclass(slots=True)
class XMLDocument:
    """Mutable XML tree plus the registry of nodes created for form elements.

    ``namespaces`` maps prefixes to URIs; it is used both to qualify
    ``prefix:name`` element names and as the XPath namespace context.
    """

    tree: etree._ElementTree
    namespaces: dict[str, str] = field(default_factory=dict["str", "str"])
    registry: NodeRegistry = field(default_factory=NodeRegistry)

    @classmethod
    def from_string(
        cls,
        xml: str | bytes,
        *,
        namespaces: Mapping[str, str] | None = None,
    ) -> XMLDocument:
        data = xml.encode("utf-8") if isinstance(xml, str) else xml
        try:
            root = etree.fromstring(data, parser=_parser())
        except etree.XMLSyntaxError as exc:
            raise DocumentError(f"Malformed XML document: {exc}") from exc
        return cls(tree=root.getroottree(), namespaces=_merge_namespaces(root, namespaces))

    @classmethod
    def from_path(
        cls,
        path: Path,
        *,
        namespaces: Mapping[str, str] | None = None,
    ) -> XMLDocument:
        return cls.from_string(path.read_bytes(), namespaces=namespaces)

    @classmethod
    def empty(
        cls,
        root_name: str,
        *,
        namespaces: Mapping[str, str] | None = None,
    ) -> XMLDocument:
        prefixes = dict(namespaces or {})
        root = etree.Element(_qualify(root_name, prefixes), nsmap=prefixes or None)
        return cls(tree=etree.ElementTree(root), namespaces=prefixes)

    @property
    def root(self) -> etree._Element:
        return self.tree.getroot()

    def qualify(self, name: str) -> str:
        """Translate ``prefix:local`` into lxml's ``{uri}local`` notation."""

        return _qualify(name, self.namespaces)

    def xpath(self, path: str, context: etree._Element | None = None) -> list[object]:
        node = context if context is not None else self.root
        try:
            result = node.xpath(path, namespaces=self.namespaces)
        except etree.XPathError as exc:
            raise DocumentError(f"Invalid XPath expression {path!r}: {exc}") from exc
        if isinstance(result, list):
            return list(result)
        return [result]

    def select_elements(
        self,
        path: str,
        context: etree._Element | None = None,
    ) -> list[etree._Element]:
        return [
            node for node in self.xpath(path, context) if isinstance(node, etree._Element)
        ]

    def parse_fragment(self, xml: str) -> etree._Element:
        """Parse a single-rooted XML snippet that may use the document's prefixes."""

        declarations = " ".join(
            f'xmlns:{prefix}="{uri}"' for prefix, uri in sorted(self.namespaces.items())
        )
        wrapped = f"<{_FRAGMENT_WRAPPER} {declarations}>{xml}</{_FRAGMENT_WRAPPER}>"
        try:
            wrapper = etree.fromstring(wrapped.encode("utf-8"), parser=_parser())
        except etree.XMLSyntaxError as exc:
            raise DocumentError(f"Malformed XML fragment: {exc}") from exc
        children = list(wrapper)
        if len(children) != 1:
            raise DocumentError("XML fragment must have exactly one root element")
        fragment = children[0]
        wrapper.remove(fragment)
        return fragment

    def to_bytes(self, *, pretty: bool = True) -> bytes:
        return etree.tostring(
            self.tree,
            pretty_print=pretty,
            xml_declaration=True,
            encoding="UTF-8",
        )

    def to_string(self, *, pretty: bool = True) -> str:
        return self.to_bytes(pretty=pretty).decode("utf-8")

    def write(self, path: Path, *, pretty: bool = True) -> None:
        path.write_bytes(self.to_bytes(pretty=pretty))


def _merge_namespaces(
    root: etree._Element,
    namespaces: Mapping[str, str] | None,
) -> dict[str, str]:
    merged = {prefix: uri for prefix, uri in root.nsmap.items() if prefix}
    if namespaces:
        merged.update(namespaces)
    return merged


def _qualify(name: str, namespaces: Mapping[str, str]) -> str:
    prefix, sep, local = name.partition(":")
    if not sep:
        return name
    uri = namespaces.get(prefix)
    if uri is None:
        raise DocumentError(f"Unknown namespace prefix: {prefix}")
    return f"{{{uri}}}{local}"
