from __future__ import annotations

import pytest

from formxml.domain.document import NodeRef, XMLDocument
from formxml.domain.form import (
    ActionContext,
    ActionPhase,
    ActionSet,
    CreateAction,
    CreateType,
    DeleteAction,
    FormElement,
    ReadAction,
    UpdateAction,
    build_action,
)
from tests.support.forms import MODS_NS, NAMESPACES, make_element


@pytest.fixture
def document() -> XMLDocument:
    document = XMLDocument.from_string(
        f'<mods xmlns="{MODS_NS}"><name type="personal"><namePart>Smith</namePart></name></mods>',
        namespaces=NAMESPACES,
    )
    document.registry.register("form", NodeRef(document.root))
    return document


def _attach(parent: FormElement, element_hash: str, actions: ActionSet) -> FormElement:
    return parent.add_child(make_element(element_hash, actions=actions))


def test_build_action_uses_kind_registry() -> None:
    action = build_action("create", {"name": "mods:title", "context": "document"})

    assert isinstance(action, CreateAction)
    assert action.phase is ActionPhase.CREATE
    assert action.context is ActionContext.DOCUMENT
    with pytest.raises(ValueError, match="Unknown action kind"):
        build_action("CreateAction", {})


def test_action_set_groups_by_phase() -> None:
    actions = ActionSet.build({"read": {"path": "mods:title"}, "delete": {}})

    assert isinstance(actions.read, ReadAction)
    assert isinstance(actions.for_phase(ActionPhase.DELETE), DeleteAction)
    assert actions.create is None
    assert actions.for_phase(ActionPhase.UPDATE) is None


def test_create_requires_a_node_source() -> None:
    with pytest.raises(ValueError, match="require an xml snippet"):
        CreateAction(node_type=CreateType.XML)
    with pytest.raises(ValueError, match="require a name"):
        CreateAction(node_type=CreateType.ATTRIBUTE)


def test_create_element_registers_node(document: XMLDocument) -> None:
    root = make_element("form")
    title = _attach(root, "form/title", ActionSet(create=CreateAction(name="mods:title")))
    action = title.actions.create
    assert action is not None

    assert not action.should_execute(document, title, "  ")
    assert action.should_execute(document, title, "T")
    assert action.execute(document, title, "T")

    node = document.registry.get("form/title")
    assert node is not None
    assert node.element.tag == f"{{{MODS_NS}}}title"
    assert node.element.getparent() is document.root
    assert node.value == "T"
    assert not action.should_execute(document, title, "T")


def test_create_waits_for_unregistered_parent(document: XMLDocument) -> None:
    root = make_element("form")
    group = _attach(root, "form/group", ActionSet(create=CreateAction(name="mods:group")))
    child = _attach(group, "form/group/child", ActionSet(create=CreateAction(name="mods:child")))
    action = child.actions.create
    assert action is not None

    assert not action.execute(document, child, "x")
    assert not document.registry.is_registered("form/group/child")


def test_create_skips_ancestors_that_only_group_fields(document: XMLDocument) -> None:
    root = make_element("form")
    tabs = _attach(root, "form/tabs", ActionSet())
    note = _attach(tabs, "form/tabs/note", ActionSet(create=CreateAction(name="mods:note")))
    action = note.actions.create
    assert action is not None

    assert action.execute(document, note, "n")

    node = document.registry.get("form/tabs/note")
    assert node is not None
    assert node.element.getparent() is document.root


def test_create_with_path_needs_a_match(document: XMLDocument) -> None:
    root = make_element("form")
    part = _attach(
        root,
        "form/part",
        ActionSet(create=CreateAction(path="mods:name[@type='corporate']", name="mods:namePart")),
    )
    existing = _attach(
        root,
        "form/existing",
        ActionSet(create=CreateAction(path="mods:name", name="mods:role")),
    )

    assert not part.actions.create.execute(document, part, "x")  # type: ignore[union-attr]
    assert existing.actions.create.execute(document, existing, "author")  # type: ignore[union-attr]
    assert document.xpath("string(mods:name/mods:role)") == ["author"]


def test_create_attribute(document: XMLDocument) -> None:
    root = make_element("form")
    authority = _attach(
        root,
        "form/authority",
        ActionSet(
            create=CreateAction(
                node_type=CreateType.ATTRIBUTE,
                context=ActionContext.DOCUMENT,
                path="mods:name",
                name="authority",
            )
        ),
    )

    assert authority.actions.create.execute(document, authority, "naf")  # type: ignore[union-attr]

    node = document.registry.get("form/authority")
    assert node is not None
    assert node.is_attribute
    assert document.xpath("string(mods:name/@authority)") == ["naf"]


def test_create_xml_fills_placeholders(document: XMLDocument) -> None:
    root = make_element("form")
    identifier = _attach(
        root,
        "form/identifier",
        ActionSet(
            create=CreateAction(
                node_type=CreateType.XML,
                xml='<mods:identifier type="%value%-type">%value%</mods:identifier>',
            )
        ),
    )

    assert identifier.actions.create.execute(document, identifier, "x1")  # type: ignore[union-attr]

    created = document.select_elements("mods:identifier")
    assert len(created) == 1
    assert created[0].text == "x1"
    assert created[0].get("type") == "x1-type"


def test_read_selects_elements_and_attributes(document: XMLDocument) -> None:
    root = make_element("form")
    name = _attach(root, "form/name", ActionSet(read=ReadAction(path="mods:name")))
    kind = _attach(name, "form/name/type", ActionSet(read=ReadAction(path="@type")))
    read_name = name.actions.read
    read_kind = kind.actions.read
    assert read_name is not None
    assert read_kind is not None

    assert read_kind.select(document, kind) == []
    assert read_name.execute(document, name, None)
    nodes = read_kind.select(document, kind)

    assert len(nodes) == 1
    assert nodes[0].is_attribute
    assert nodes[0].value == "personal"
    assert not read_name.should_execute(document, name, None)


def test_update_only_when_value_changes(document: XMLDocument) -> None:
    root = make_element("form")
    part = _attach(root, "form/part", ActionSet(update=UpdateAction()))
    action = part.actions.update
    assert action is not None

    assert not action.should_execute(document, part, "Jones")

    document.registry.register("form/part", NodeRef(document.select_elements("//mods:namePart")[0]))

    assert not action.should_execute(document, part, "Smith")
    assert not action.should_execute(document, part, "")
    assert not action.should_execute(document, part, {"nested": "x"})
    assert action.should_execute(document, part, "Jones")
    assert action.execute(document, part, "Jones")
    assert document.xpath("string(//mods:namePart)") == ["Jones"]


def test_update_with_relative_path(document: XMLDocument) -> None:
    root = make_element("form")
    name = _attach(root, "form/name", ActionSet(update=UpdateAction(path="@type")))
    document.registry.register("form/name", NodeRef(document.select_elements("mods:name")[0]))
    action = name.actions.update
    assert action is not None

    assert action.should_execute(document, name, "family")
    assert action.execute(document, name, "family")
    assert document.xpath("string(mods:name/@type)") == ["family"]


def test_delete_removes_subtree_and_is_idempotent(document: XMLDocument) -> None:
    root = make_element("form")
    name = _attach(root, "form/name", ActionSet(delete=DeleteAction()))
    name_element = document.select_elements("mods:name")[0]
    document.registry.register("form/name", NodeRef(name_element))
    document.registry.register("form/name/type", NodeRef(name_element, "type"))
    document.registry.register("form/name/part", NodeRef(name_element[0]))
    action = name.actions.delete
    assert action is not None

    assert not action.should_execute(document, name, "kept")
    assert action.should_execute(document, name, {"part": ""})
    assert action.execute(document, name, None)

    assert document.select_elements("mods:name") == []
    assert document.registry.hashes() == ("form",)
    assert not action.execute(document, name, None)
    assert not action.should_execute(document, name, None)
