from __future__ import annotations

from tessera.exceptions import ParseError
from tessera.syntax import factory
from tessera.syntax.lexer import LexToken, TokenType, tokenize
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
)

RESOURCE_KEYWORD = "resource"

_KEY_TOKENS = (
    TokenType.IDENTIFIER,
    TokenType.STRING,
    TokenType.TRUE,
    TokenType.FALSE,
    TokenType.NULL,
)


class Parser:
    """Recursive-descent parser for resource declarations.

    Only the declaration subset produced by the printer is accepted. A
    missing declaration identifier is tolerated and recorded as a
    diagnostic so that generated text with an empty name still reads back.
    """

    def __init__(self, text: str) -> None:
        self.tokens = tokenize(text)
        self.position = 0
        self.diagnostics: list[str] = []

    def _peek(self) -> LexToken:
        return self.tokens[self.position]

    def _advance(self) -> LexToken:
        token = self.tokens[self.position]
        if token.type is not TokenType.END_OF_FILE:
            self.position += 1
        return token

    def _error(self, message: str, token: LexToken | None = None) -> ParseError:
        token = token or self._peek()
        return ParseError(message, line=token.line, column=token.column)

    def _expect(self, token_type: TokenType) -> LexToken:
        token = self._peek()
        if token.type is not token_type:
            raise self._error(
                f"Expected {token_type.value!r} but found {token.text or token.type.value!r}"
            )
        return self._advance()

    def _skip_newlines(self) -> None:
        while self._peek().type is TokenType.NEWLINE:
            self._advance()

    def _end_of_line(self) -> None:
        token = self._peek()
        if token.type is TokenType.COMMA:
            self._advance()
            return
        if token.type in (TokenType.NEWLINE, TokenType.END_OF_FILE):
            return
        if token.type in (TokenType.RIGHT_BRACE, TokenType.RIGHT_SQUARE):
            return
        raise self._error(f"Expected a new line but found {token.text!r}")

    def parse_program(self) -> Program:
        declarations: list[Declaration] = []
        self._skip_newlines()
        while self._peek().type is not TokenType.END_OF_FILE:
            declarations.append(self._declaration())
            token = self._peek()
            if token.type not in (TokenType.NEWLINE, TokenType.END_OF_FILE):
                raise self._error(f"Unexpected {token.text!r} after declaration")
            self._skip_newlines()
        return Program(
            declarations=tuple(declarations),
            diagnostics=tuple(self.diagnostics),
        )

    def _declaration(self) -> Declaration:
        keyword = self._peek()
        if keyword.type is not TokenType.IDENTIFIER or keyword.text != RESOURCE_KEYWORD:
            raise self._error(f"Expected {RESOURCE_KEYWORD!r} declaration")
        self._advance()
        name_token = self._peek()
        if name_token.type is TokenType.IDENTIFIER:
            self._advance()
            identifier = Identifier(name_token.text)
        elif name_token.type in (TokenType.TRUE, TokenType.FALSE, TokenType.NULL):
            self._advance()
            self.diagnostics.append(
                f"line {name_token.line + 1}: {name_token.text!r} is a reserved word"
            )
            identifier = Identifier(name_token.text)
        elif name_token.type is TokenType.STRING:
            self.diagnostics.append(
                f"line {name_token.line + 1}: expected a resource identifier"
            )
            identifier = Identifier("")
        else:
            raise self._error("Expected a resource identifier")
        type_token = self._expect(TokenType.STRING)
        modifier = None
        token = self._peek()
        if token.type is TokenType.IDENTIFIER and token.text == factory.EXISTING_KEYWORD:
            self._advance()
            modifier = factory.create_existing_modifier()
        self._expect(TokenType.ASSIGNMENT)
        body = self._expression()
        return Declaration(
            identifier=identifier,
            type_literal=StringLiteral(str(type_token.value)),
            body=body,
            modifier=modifier,
            keyword=RESOURCE_KEYWORD,
        )

    def _expression(self) -> Expression:
        token = self._peek()
        match token.type:
            case TokenType.LEFT_BRACE:
                return self._object()
            case TokenType.LEFT_SQUARE:
                return self._array()
            case TokenType.STRING:
                self._advance()
                return StringLiteral(str(token.value))
            case TokenType.INTEGER:
                self._advance()
                return IntegerLiteral(int(token.value))
            case TokenType.TRUE:
                self._advance()
                return BooleanLiteral(True)
            case TokenType.FALSE:
                self._advance()
                return BooleanLiteral(False)
            case TokenType.NULL:
                self._advance()
                return NullLiteral()
            case _:
                raise self._error(
                    f"Expected an expression but found {token.text or token.type.value!r}"
                )

    def _object(self) -> ObjectExpr:
        self._expect(TokenType.LEFT_BRACE)
        properties: list[PropertyExpr] = []
        self._skip_newlines()
        while self._peek().type is not TokenType.RIGHT_BRACE:
            key_token = self._peek()
            if key_token.type not in _KEY_TOKENS:
                raise self._error(f"Expected a property name but found {key_token.text!r}")
            self._advance()
            key = str(key_token.value) if key_token.type is TokenType.STRING else key_token.text
            self._expect(TokenType.COLON)
            properties.append(PropertyExpr(key=key, value=self._expression()))
            self._end_of_line()
            self._skip_newlines()
        self._expect(TokenType.RIGHT_BRACE)
        return ObjectExpr(properties=tuple(properties))

    def _array(self) -> ArrayExpr:
        self._expect(TokenType.LEFT_SQUARE)
        items: list[Expression] = []
        self._skip_newlines()
        while self._peek().type is not TokenType.RIGHT_SQUARE:
            items.append(self._expression())
            self._end_of_line()
            self._skip_newlines()
        self._expect(TokenType.RIGHT_SQUARE)
        return ArrayExpr(items=tuple(items))


def parse_program(text: str) -> Program:
    return Parser(text).parse_program()
