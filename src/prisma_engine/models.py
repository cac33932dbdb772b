"""Typed views of the JSON the query engine prints.

Only the commonly used parts of each shape are declared. Unknown keys are kept
(``extra="allow"``) so newer engines do not break decoding, and models dump
back to the engine's camelCase keys for the DMMF-to-DML round trip.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class EngineModel(BaseModel):
    """Base for engine payloads: camelCase on the wire, extra keys preserved."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_engine_dict(self) -> dict[str, Any]:
        """Dump with engine key names, leaving out fields that were never set."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


# --- Document model (DMMF) ---


class ModelField(EngineModel):
    name: str
    kind: str
    type: str
    is_list: bool = False
    is_required: bool = False
    is_unique: bool = False
    is_id: bool = False
    db_names: list[str] | None = None
    is_generated: bool | None = None
    has_default_value: bool | None = None
    default: Any = None
    relation_name: str | None = None
    relation_from_fields: list[str] | None = None
    relation_to_fields: list[str] | None = None
    relation_on_delete: str | None = None
    is_updated_at: bool | None = None
    documentation: str | None = None


class Model(EngineModel):
    name: str
    fields: list[ModelField] = Field(default_factory=list)
    is_embedded: bool = False
    db_name: str | None = None
    id_fields: list[str] | None = None
    unique_fields: list[list[str]] | None = None
    is_generated: bool | None = None
    documentation: str | None = None


class EnumValue(EngineModel):
    name: str
    db_name: str | None = None


class DatamodelEnum(EngineModel):
    name: str
    values: list[EnumValue | str] = Field(default_factory=list)
    db_name: str | None = None
    documentation: str | None = None

    @property
    def value_names(self) -> list[str]:
        return [v if isinstance(v, str) else v.name for v in self.values]


class Datamodel(EngineModel):
    models: list[Model] = Field(default_factory=list)
    enums: list[DatamodelEnum] = Field(default_factory=list)

    def get_model(self, name: str) -> Model | None:
        """Look up a model by name."""
        return next((m for m in self.models if m.name == name), None)


class DMMFDocument(EngineModel):
    """Document model returned by ``cli --dmmf``.

    ``schema`` (the generated query schema) is kept as raw JSON; it is large
    and only consumed by code generators.
    """

    datamodel: Datamodel
    schema_: dict[str, Any] = Field(default_factory=dict, alias="schema")
    mappings: Any = Field(default_factory=list)


# --- Configuration metadata ---


class EnvValue(EngineModel):
    value: str | None = None
    from_env_var: str | None = None


class DataSource(EngineModel):
    name: str
    connector_type: str
    url: EnvValue
    config: dict[str, str] = Field(default_factory=dict)


class GeneratorConfig(EngineModel):
    name: str
    provider: str
    output: str | None = None
    config: dict[str, str] = Field(default_factory=dict)
    binary_targets: list[str] = Field(default_factory=list)
    pinned_binary_target: str | None = None


class ConfigMetaFormat(EngineModel):
    """Datasources and generators returned by ``cli --get_config``."""

    datasources: list[DataSource] = Field(default_factory=list)
    generators: list[GeneratorConfig] = Field(default_factory=list)


class WholeDMMF(EngineModel):
    """Input of ``cli --dmmf_to_dml``: a datamodel plus its configuration."""

    dmmf: Datamodel
    config: ConfigMetaFormat
