"""Declaration syntax: immutable nodes, parser and pretty printer."""

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
    SyntaxNode,
    Token,
)
from tessera.syntax.parser import parse_program
from tessera.syntax.printer import (
    IndentKindOption,
    NewlineOption,
    PrettyPrinter,
    PrintOptions,
    print_program,
)

__all__ = [
    "ArrayExpr",
    "BooleanLiteral",
    "Declaration",
    "Expression",
    "Identifier",
    "IndentKindOption",
    "IntegerLiteral",
    "NewlineOption",
    "NullLiteral",
    "ObjectExpr",
    "PrettyPrinter",
    "PrintOptions",
    "Program",
    "PropertyExpr",
    "StringLiteral",
    "SyntaxNode",
    "Token",
    "parse_program",
    "print_program",
]
