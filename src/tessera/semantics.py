"""Schema-aware view over a declaration document.

A view is rebuilt from scratch for every tree it describes. Properties are
bound to schema properties case-insensitively, but nested schema is only
attributed below keys spelled exactly as the schema spells them; a
mis-cased key leaves its subtree untyped until it has been renamed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, TypeAlias

from tessera.config import TesseraConfig
from tessera.document import CompiledContext
from tessera.exceptions import SemanticViewError
from tessera.files import FileResolver
from tessera.syntax.nodes import (
    ArrayExpr,
    BooleanLiteral,
    Declaration,
    IntegerLiteral,
    NullLiteral,
    ObjectExpr,
    Program,
    StringLiteral,
)
from tessera.typesystem.catalog import ResourceSchema, split_type_reference
from tessera.typesystem.schema import (
    ArrayType,
    ObjectType,
    TypeDefinitions,
    TypeProperty,
    TypeRef,
)

PathSegment: TypeAlias = str | int
NodePath: TypeAlias = tuple[PathSegment, ...]
BindingKey: TypeAlias = tuple[int, NodePath, str]

_SCALARS = (StringLiteral, IntegerLiteral, BooleanLiteral, NullLiteral)


@dataclass(frozen=True)
class PropertyBinding:
    declared: TypeProperty
    exact: bool

    @property
    def canonical_name(self) -> str:
        return self.declared.name


@dataclass(frozen=True)
class SemanticView:
    program: Program
    configuration: TesseraConfig
    schemas: tuple[ResourceSchema | None, ...] = ()
    bindings: Mapping[BindingKey, PropertyBinding] = field(default_factory=dict)
    diagnostics: tuple[str, ...] = ()

    def binding(
        self, declaration_index: int, path: NodePath, key: str
    ) -> PropertyBinding | None:
        return self.bindings.get((declaration_index, path, key))

    @classmethod
    def build(
        cls,
        context: CompiledContext,
        program: Program,
        file_resolver: FileResolver,
        configuration: TesseraConfig,
    ) -> "SemanticView":
        if not isinstance(program, Program):
            raise SemanticViewError(f"Expected a program, got {type(program).__name__}")
        diagnostics = list(program.diagnostics)
        schemas: list[ResourceSchema | None] = []
        bindings: dict[BindingKey, PropertyBinding] = {}
        for index, declaration in enumerate(program.declarations):
            if not isinstance(declaration, Declaration):
                raise SemanticViewError(
                    f"Statement {index} is not a declaration: {type(declaration).__name__}"
                )
            if not isinstance(declaration.type_literal, StringLiteral):
                raise SemanticViewError(f"Declaration {index} has no type string")
            schema = _resolve_schema(context, declaration, file_resolver, diagnostics)
            schemas.append(schema)
            definitions = schema.definitions if schema else TypeDefinitions()
            body_type = schema.body if schema else None
            _bind(declaration.body, body_type, definitions, (), index, bindings)
        return cls(
            program=program,
            configuration=configuration,
            schemas=tuple(schemas),
            bindings=bindings,
            diagnostics=tuple(diagnostics),
        )


def _resolve_schema(
    context: CompiledContext,
    declaration: Declaration,
    file_resolver: FileResolver,
    diagnostics: list[str],
) -> ResourceSchema | None:
    descriptor = split_type_reference(declaration.type_literal.value)
    if descriptor is None:
        diagnostics.append(
            f"Malformed resource type string {declaration.type_literal.value!r}"
        )
        return None
    try:
        schema = context.types.schema_for(descriptor, file_resolver)
    except (OSError, ValueError) as exc:
        raise SemanticViewError(
            f"Failed to load schema for {descriptor.format_name()}: {exc}"
        ) from exc
    if schema is None:
        diagnostics.append(f"Unknown resource type {descriptor.format_name()}")
    return schema


def _bind(
    node: object,
    type_ref: TypeRef | None,
    definitions: TypeDefinitions,
    path: NodePath,
    declaration_index: int,
    out: dict[BindingKey, PropertyBinding],
) -> None:
    resolved = definitions.resolve(type_ref) if type_ref is not None else None
    match node:
        case ObjectExpr(properties=properties):
            object_type = resolved if isinstance(resolved, ObjectType) else None
            for prop in properties:
                child_type: TypeRef | None = None
                if object_type is not None:
                    declared = object_type.lookup(prop.key)
                    if declared is not None:
                        exact = declared.name == prop.key
                        out[(declaration_index, path, prop.key)] = PropertyBinding(
                            declared, exact
                        )
                        if exact:
                            child_type = declared.type
                    else:
                        child_type = object_type.additional_properties
                _bind(
                    prop.value,
                    child_type,
                    definitions,
                    path + (prop.key,),
                    declaration_index,
                    out,
                )
        case ArrayExpr(items=items):
            item_type = resolved.items if isinstance(resolved, ArrayType) else None
            for position, item in enumerate(items):
                _bind(item, item_type, definitions, path + (position,), declaration_index, out)
        case _ if isinstance(node, _SCALARS):
            return
        case _:
            raise SemanticViewError(f"Unexpected syntax node {type(node).__name__}")
