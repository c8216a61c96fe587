"""Pydantic models for JSON form definitions."""

from __future__ import annotations

from typing import Literal, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from formxml.domain.form import ActionContext, CreateType


class DefinitionBaseModel(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class CreateDefinition(DefinitionBaseModel):
    node_type: CreateType = Field(default=CreateType.ELEMENT, alias="type")
    context: ActionContext = ActionContext.PARENT
    path: str | None = None
    name: str | None = None
    xml: str | None = None

    @model_validator(mode="after")
    def _require_node_source(self) -> Self:
        if self.node_type is CreateType.XML and not self.xml:
            raise ValueError("xml create actions require an xml snippet")
        if self.node_type is not CreateType.XML and not self.name:
            raise ValueError(f"{self.node_type} create actions require a name")
        return self


class ReadDefinition(DefinitionBaseModel):
    path: str
    context: ActionContext = ActionContext.PARENT


class UpdateDefinition(DefinitionBaseModel):
    path: str | None = None


class DeleteDefinition(DefinitionBaseModel):
    pass


class ActionsDefinition(DefinitionBaseModel):
    create: CreateDefinition | None = None
    read: ReadDefinition | None = None
    update: UpdateDefinition | None = None
    delete: DeleteDefinition | None = None


class ElementDefinition(DefinitionBaseModel):
    key: str = Field(min_length=1, pattern=r"^[^/\[\]]+$")
    type: Literal["textfield", "textarea", "select", "checkbox", "fieldset", "tabs", "hidden"] = (
        "textfield"
    )
    title: str | None = None
    access: bool | None = None
    repeatable: bool = False
    actions: ActionsDefinition = Field(default_factory=ActionsDefinition)
    children: list[ElementDefinition] = Field(default_factory=list["ElementDefinition"])


class FormDefinition(DefinitionBaseModel):
    name: str = Field(min_length=1, pattern=r"^[^/\[\]]+$")
    root: str
    namespaces: dict[str, str] = Field(default_factory=dict)
    elements: list[ElementDefinition] = Field(default_factory=list["ElementDefinition"])
