from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from formxml.adapters.form_definition import load_form_definition, translate_form
from formxml.config import RepositoryConfig, ResilienceConfig
from formxml.domain.document import XMLDocument
from tests.support.repository import FakeRepositoryClient

if TYPE_CHECKING:
    from formxml.adapters.form_definition import FormDefinition
    from formxml.domain.form import FormElement

DATA_DIR = Path(__file__).resolve().parent / "data"


@pytest.fixture(scope="session")
def data_dir() -> Path:
    return DATA_DIR


@pytest.fixture
def mods_definition() -> FormDefinition:
    return load_form_definition(DATA_DIR / "mods_form.json")


@pytest.fixture
def mods_template(mods_definition: FormDefinition) -> FormElement:
    return translate_form(mods_definition)


@pytest.fixture
def mods_document(mods_definition: FormDefinition) -> XMLDocument:
    return XMLDocument.from_path(
        DATA_DIR / "mods_document.xml",
        namespaces=mods_definition.namespaces,
    )


@pytest.fixture
def empty_mods_document(mods_definition: FormDefinition) -> XMLDocument:
    return XMLDocument.empty(mods_definition.root, namespaces=mods_definition.namespaces)


@pytest.fixture
def repository_config() -> RepositoryConfig:
    return RepositoryConfig(
        resilience=ResilienceConfig(name="fedora", base_url="http://fedora.test/fedora"),
        admin_principal="fedoraAdmin",
        test_principal="tester",
        pid_namespace="test",
    )


@pytest.fixture
def fake_repository() -> FakeRepositoryClient:
    return FakeRepositoryClient()
