from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum

from tessera.invariants import never
from tessera.syntax.lexer import KEYWORDS
from tessera.syntax.nodes import (
    ArrayExpr,
    BooleanLiteral,
    Declaration,
    Expression,
    IntegerLiteral,
    NullLiteral,
    ObjectExpr,
    Program,
    StringLiteral,
)

_IDENTIFIER_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


class NewlineOption(StrEnum):
    LF = "lf"
    CRLF = "crlf"

    @property
    def text(self) -> str:
        return "\r\n" if self is NewlineOption.CRLF else "\n"


class IndentKindOption(StrEnum):
    SPACE = "space"
    TAB = "tab"


@dataclass(frozen=True)
class PrintOptions:
    newline: NewlineOption = NewlineOption.LF
    indent_kind: IndentKindOption = IndentKindOption.SPACE
    indent_size: int = 2
    insert_final_newline: bool = False

    @property
    def indent_unit(self) -> str:
        if self.indent_kind is IndentKindOption.TAB:
            return "\t"
        return " " * max(0, self.indent_size)


def escape_string(value: str) -> str:
    out: list[str] = ["'"]
    index = 0
    while index < len(value):
        char = value[index]
        if char == "\\":
            out.append("\\\\")
        elif char == "'":
            out.append("\\'")
        elif char == "\n":
            out.append("\\n")
        elif char == "\r":
            out.append("\\r")
        elif char == "\t":
            out.append("\\t")
        elif char == "$" and value[index + 1 : index + 2] == "{":
            out.append("\\$")
        elif ord(char) < 0x20:
            out.append(f"\\u{{{ord(char):X}}}")
        else:
            out.append(char)
        index += 1
    out.append("'")
    return "".join(out)


def format_property_key(key: str) -> str:
    if _IDENTIFIER_RE.fullmatch(key) and key not in KEYWORDS:
        return key
    return escape_string(key)


class PrettyPrinter:
    def __init__(self, options: PrintOptions) -> None:
        self.options = options
        self.newline = options.newline.text
        self.indent_unit = options.indent_unit

    def print_program(self, program: Program) -> str:
        text = self.newline.join(
            self.print_declaration(declaration) for declaration in program.declarations
        )
        if self.options.insert_final_newline:
            text += self.newline
        return text

    def print_declaration(self, declaration: Declaration) -> str:
        parts = [
            declaration.keyword,
            declaration.identifier.name,
            escape_string(declaration.type_literal.value),
        ]
        if declaration.modifier is not None:
            parts.append(declaration.modifier.text)
        parts.append("=")
        return " ".join(parts) + " " + self.print_expression(declaration.body, 0)

    def print_expression(self, node: Expression, depth: int) -> str:
        match node:
            case ObjectExpr(properties=()):
                return "{}"
            case ObjectExpr(properties=properties):
                inner = self.indent_unit * (depth + 1)
                lines = ["{"]
                for prop in properties:
                    value = self.print_expression(prop.value, depth + 1)
                    lines.append(f"{inner}{format_property_key(prop.key)}: {value}")
                lines.append(self.indent_unit * depth + "}")
                return self.newline.join(lines)
            case ArrayExpr(items=()):
                return "[]"
            case ArrayExpr(items=items):
                inner = self.indent_unit * (depth + 1)
                lines = ["["]
                for item in items:
                    lines.append(inner + self.print_expression(item, depth + 1))
                lines.append(self.indent_unit * depth + "]")
                return self.newline.join(lines)
            case StringLiteral(value=value):
                return escape_string(value)
            case IntegerLiteral(value=value):
                return str(value)
            case BooleanLiteral(value=value):
                return "true" if value else "false"
            case NullLiteral():
                return "null"
            case _:
                never("unprintable syntax node", node_type=type(node).__name__)


def print_program(program: Program, options: PrintOptions | None = None) -> str:
    return PrettyPrinter(options or PrintOptions()).print_program(program)
