"""Resource body schemas.

Type definition files are validated with pydantic and converted into small
frozen runtime types. Object properties are looked up case-insensitively;
the lookup reports the schema's own spelling so callers can tell an exact
match from a casing mismatch.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Dict, List, Literal, Mapping, Optional, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, model_validator


class PropertyFlag(StrEnum):
    READ_ONLY = "ReadOnly"
    WRITE_ONLY = "WriteOnly"
    REQUIRED = "Required"


class TypeDefDTO(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    kind: Optional[Literal["object", "array", "string", "int", "bool", "any"]] = None
    ref: Optional[str] = Field(default=None, alias="$ref")
    properties: Dict[str, "PropertyDTO"] = {}
    additional_properties: Optional["TypeDefDTO"] = Field(
        default=None, alias="additionalProperties"
    )
    items: Optional["TypeDefDTO"] = None

    @model_validator(mode="after")
    def _kind_or_ref(self) -> "TypeDefDTO":
        if (self.kind is None) == (self.ref is None):
            raise ValueError("type definitions need exactly one of 'kind' or '$ref'")
        if self.kind == "array" and self.items is None:
            raise ValueError("array types need 'items'")
        return self


class PropertyDTO(BaseModel):
    type: TypeDefDTO
    flags: List[PropertyFlag] = []
    description: Optional[str] = None


class DefinitionsFileDTO(BaseModel):
    definitions: Dict[str, TypeDefDTO]


TypeDefDTO.model_rebuild()


@dataclass(frozen=True)
class PrimitiveType:
    kind: str


@dataclass(frozen=True)
class ArrayType:
    items: "TypeRef"


@dataclass(frozen=True)
class TypeProperty:
    name: str
    type: "TypeRef"
    flags: frozenset[PropertyFlag] = frozenset()

    @property
    def read_only(self) -> bool:
        return PropertyFlag.READ_ONLY in self.flags


@dataclass(frozen=True)
class ObjectType:
    properties: Mapping[str, TypeProperty] = field(default_factory=dict)
    additional_properties: "TypeRef | None" = None

    def lookup(self, key: str) -> TypeProperty | None:
        exact = self.properties.get(key)
        if exact is not None:
            return exact
        folded = key.casefold()
        for name, prop in self.properties.items():
            if name.casefold() == folded:
                return prop
        return None


@dataclass(frozen=True)
class NamedRef:
    name: str


SchemaType: TypeAlias = ObjectType | ArrayType | PrimitiveType
TypeRef: TypeAlias = SchemaType | NamedRef


@dataclass(frozen=True)
class TypeDefinitions:
    types: Mapping[str, TypeRef] = field(default_factory=dict)

    def resolve(self, ref: TypeRef | None) -> SchemaType | None:
        seen: set[str] = set()
        while isinstance(ref, NamedRef):
            if ref.name in seen:
                return None
            seen.add(ref.name)
            ref = self.types.get(ref.name)
        return ref


def _convert(dto: TypeDefDTO) -> TypeRef:
    if dto.ref is not None:
        return NamedRef(dto.ref)
    match dto.kind:
        case "object":
            return ObjectType(
                properties={
                    name: TypeProperty(
                        name=name,
                        type=_convert(prop.type),
                        flags=frozenset(prop.flags),
                    )
                    for name, prop in dto.properties.items()
                },
                additional_properties=(
                    _convert(dto.additional_properties)
                    if dto.additional_properties is not None
                    else None
                ),
            )
        case "array":
            return ArrayType(items=_convert(dto.items))
        case _:
            return PrimitiveType(str(dto.kind))


def load_definitions(text: str) -> TypeDefinitions:
    payload = DefinitionsFileDTO.model_validate_json(text)
    return TypeDefinitions(
        types={name: _convert(dto) for name, dto in payload.definitions.items()}
    )
