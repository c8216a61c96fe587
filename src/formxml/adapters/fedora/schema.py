"""Pydantic models for Fedora 3 REST API XML responses."""

from __future__ import annotations

from lxml import etree
from pydantic import BaseModel, ConfigDict, Field

TYPES_NS = "http://www.fedora.info/definitions/1/0/types/"


class FedoraSchemaError(ValueError):
    """Raised when a Fedora response body is not the XML we expect."""


class FedoraBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class FedoraDatastream(FedoraBaseModel):
    dsid: str
    label: str = ""
    mime_type: str = Field(default="", alias="mimeType")


class ObjectDatastreams(FedoraBaseModel):
    pid: str
    datastreams: list[FedoraDatastream] = Field(default_factory=list["FedoraDatastream"])


class PidList(FedoraBaseModel):
    pids: list[str] = Field(default_factory=list["str"])


class ObjectSearchPage(FedoraBaseModel):
    pids: list[str] = Field(default_factory=list["str"])
    session_token: str | None = None


def _parse(body: bytes) -> etree._Element:
    parser = etree.XMLParser(resolve_entities=False, no_network=True)
    try:
        return etree.fromstring(body, parser=parser)
    except etree.XMLSyntaxError as exc:
        raise FedoraSchemaError(f"Malformed Fedora response: {exc}") from exc


def _local_name(element: etree._Element) -> str:
    if not isinstance(element.tag, str):
        return ""
    return etree.QName(element).localname


def parse_object_datastreams(body: bytes) -> ObjectDatastreams:
    root = _parse(body)
    if _local_name(root) != "objectDatastreams":
        raise FedoraSchemaError(f"Unexpected datastream list root: {root.tag}")
    datastreams = [
        dict(node.attrib) for node in root if _local_name(node) == "datastream"
    ]
    return ObjectDatastreams.model_validate(
        {"pid": root.get("pid", ""), "datastreams": datastreams}
    )


def parse_pid_list(body: bytes) -> PidList:
    root = _parse(body)
    if _local_name(root) != "pidList":
        raise FedoraSchemaError(f"Unexpected PID list root: {root.tag}")
    pids = [
        (node.text or "").strip() for node in root.iter() if _local_name(node) == "pid"
    ]
    return PidList.model_validate({"pids": [pid for pid in pids if pid]})


def parse_search_page(body: bytes) -> ObjectSearchPage:
    root = _parse(body)
    if _local_name(root) != "result":
        raise FedoraSchemaError(f"Unexpected search result root: {root.tag}")
    pids = [
        (node.text or "").strip()
        for node in root.iter(f"{{{TYPES_NS}}}pid", "pid")
    ]
    tokens = [
        (node.text or "").strip()
        for node in root.iter(f"{{{TYPES_NS}}}token", "token")
    ]
    return ObjectSearchPage.model_validate(
        {
            "pids": [pid for pid in pids if pid],
            "session_token": next((token for token in tokens if token), None),
        }
    )
