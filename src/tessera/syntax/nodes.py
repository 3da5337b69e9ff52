"""Immutable syntax tree for resource declarations.

Nodes carry no trivia and no parent links; two trees are equal when their
structure and values are equal, so printing and re-parsing a tree gives
back an equal tree.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TypeAlias


@dataclass(frozen=True)
class Token:
    kind: str
    text: str


@dataclass(frozen=True)
class Identifier:
    name: str


@dataclass(frozen=True)
class StringLiteral:
    value: str


@dataclass(frozen=True)
class IntegerLiteral:
    value: int


@dataclass(frozen=True)
class BooleanLiteral:
    value: bool


@dataclass(frozen=True)
class NullLiteral:
    pass


@dataclass(frozen=True)
class PropertyExpr:
    key: str
    value: "Expression"


@dataclass(frozen=True)
class ObjectExpr:
    properties: tuple[PropertyExpr, ...] = ()

    def get(self, key: str) -> PropertyExpr | None:
        for prop in self.properties:
            if prop.key == key:
                return prop
        return None


@dataclass(frozen=True)
class ArrayExpr:
    items: tuple["Expression", ...] = ()


Expression: TypeAlias = (
    ObjectExpr
    | ArrayExpr
    | StringLiteral
    | IntegerLiteral
    | BooleanLiteral
    | NullLiteral
)


@dataclass(frozen=True)
class Declaration:
    identifier: Identifier
    type_literal: StringLiteral
    body: Expression
    modifier: Token | None = None
    keyword: str = "resource"


@dataclass(frozen=True)
class Program:
    declarations: tuple[Declaration, ...] = ()
    diagnostics: tuple[str, ...] = field(default=(), compare=False)


SyntaxNode: TypeAlias = (
    Program
    | Declaration
    | PropertyExpr
    | Identifier
    | Token
    | Expression
)
