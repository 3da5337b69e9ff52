from __future__ import annotations

from typing import Iterable

from tessera.syntax.nodes import (
    ArrayExpr,
    BooleanLiteral,
    Declaration,
    Expression,
    Identifier,
    IntegerLiteral,
    NullLiteral,
    ObjectExpr,
    Program,
    PropertyExpr,
    StringLiteral,
    Token,
)

EXISTING_KEYWORD = "existing"


def create_object(properties: Iterable[PropertyExpr]) -> ObjectExpr:
    return ObjectExpr(properties=tuple(properties))


def create_property(key: str, value: Expression) -> PropertyExpr:
    return PropertyExpr(key=key, value=value)


def create_array(items: Iterable[Expression]) -> ArrayExpr:
    return ArrayExpr(items=tuple(items))


def create_string(value: str) -> StringLiteral:
    return StringLiteral(value=value)


def create_integer(value: int) -> IntegerLiteral:
    return IntegerLiteral(value=value)


def create_boolean(value: bool) -> BooleanLiteral:
    return BooleanLiteral(value=value)


def create_null() -> NullLiteral:
    return NullLiteral()


def create_existing_modifier() -> Token:
    return Token(kind="identifier", text=EXISTING_KEYWORD)


def create_resource_declaration(
    name: str,
    type_name: str,
    body: Expression,
    *,
    modifier: Token | None = None,
) -> Declaration:
    return Declaration(
        identifier=Identifier(name),
        type_literal=StringLiteral(type_name),
        body=body,
        modifier=modifier,
    )


def create_program(declarations: Iterable[Declaration]) -> Program:
    return Program(declarations=tuple(declarations))
