from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from tessera.exceptions import ParseError


class TokenType(StrEnum):
    LEFT_BRACE = "{"
    RIGHT_BRACE = "}"
    LEFT_SQUARE = "["
    RIGHT_SQUARE = "]"
    COLON = ":"
    ASSIGNMENT = "="
    COMMA = ","
    NEWLINE = "newline"
    STRING = "string"
    INTEGER = "integer"
    IDENTIFIER = "identifier"
    TRUE = "true"
    FALSE = "false"
    NULL = "null"
    END_OF_FILE = "eof"


KEYWORDS = {
    "true": TokenType.TRUE,
    "false": TokenType.FALSE,
    "null": TokenType.NULL,
}

_PUNCTUATION = {
    "{": TokenType.LEFT_BRACE,
    "}": TokenType.RIGHT_BRACE,
    "[": TokenType.LEFT_SQUARE,
    "]": TokenType.RIGHT_SQUARE,
    ":": TokenType.COLON,
    "=": TokenType.ASSIGNMENT,
    ",": TokenType.COMMA,
}

_SIMPLE_ESCAPES = {
    "\\": "\\",
    "'": "'",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "$": "$",
}


@dataclass(frozen=True)
class LexToken:
    type: TokenType
    text: str
    line: int
    column: int
    value: str | int | None = None


def _is_identifier_start(char: str) -> bool:
    return char == "_" or ("a" <= char <= "z") or ("A" <= char <= "Z")


def _is_identifier_part(char: str) -> bool:
    return _is_identifier_start(char) or char.isdigit()


class Lexer:
    def __init__(self, text: str) -> None:
        self.text = text
        self.index = 0
        self.line = 0
        self.column = 0

    def _error(self, message: str) -> ParseError:
        return ParseError(message, line=self.line, column=self.column)

    def _peek(self, ahead: int = 0) -> str:
        index = self.index + ahead
        if index < len(self.text):
            return self.text[index]
        return ""

    def _advance(self, count: int = 1) -> str:
        consumed = self.text[self.index : self.index + count]
        for char in consumed:
            if char == "\n":
                self.line += 1
                self.column = 0
            else:
                self.column += 1
        self.index += count
        return consumed

    def tokens(self) -> list[LexToken]:
        result: list[LexToken] = []
        while True:
            token = self._next_token()
            result.append(token)
            if token.type is TokenType.END_OF_FILE:
                return result

    def _skip_trivia(self) -> None:
        while True:
            char = self._peek()
            if char in (" ", "\t"):
                self._advance()
            elif char == "/" and self._peek(1) == "/":
                while self._peek() not in ("", "\n", "\r"):
                    self._advance()
            elif char == "/" and self._peek(1) == "*":
                end = self.text.find("*/", self.index + 2)
                if end < 0:
                    raise self._error("Unterminated multi-line comment")
                self._advance(end + 2 - self.index)
            else:
                return

    def _next_token(self) -> LexToken:
        self._skip_trivia()
        line, column = self.line, self.column
        char = self._peek()
        if not char:
            return LexToken(TokenType.END_OF_FILE, "", line, column)
        if char == "\r" and self._peek(1) == "\n":
            return LexToken(TokenType.NEWLINE, self._advance(2), line, column)
        if char in ("\n", "\r"):
            return LexToken(TokenType.NEWLINE, self._advance(), line, column)
        if char in _PUNCTUATION:
            return LexToken(_PUNCTUATION[char], self._advance(), line, column)
        if char == "'":
            return self._string(line, column)
        if char.isdigit() or (char == "-" and self._peek(1).isdigit()):
            start = self.index
            self._advance()
            while self._peek().isdigit():
                self._advance()
            text = self.text[start : self.index]
            return LexToken(TokenType.INTEGER, text, line, column, int(text))
        if _is_identifier_start(char):
            start = self.index
            while _is_identifier_part(self._peek()):
                self._advance()
            text = self.text[start : self.index]
            return LexToken(
                KEYWORDS.get(text, TokenType.IDENTIFIER), text, line, column, text
            )
        raise self._error(f"Unexpected character {char!r}")

    def _string(self, line: int, column: int) -> LexToken:
        start = self.index
        self._advance()
        chars: list[str] = []
        while True:
            char = self._peek()
            if not char or char in ("\n", "\r"):
                raise ParseError("Unterminated string", line=line, column=column)
            if char == "'":
                self._advance()
                break
            if char == "$" and self._peek(1) == "{":
                raise self._error("String interpolation is not supported")
            if char != "\\":
                chars.append(self._advance())
                continue
            self._advance()
            escape = self._peek()
            if escape in _SIMPLE_ESCAPES:
                self._advance()
                chars.append(_SIMPLE_ESCAPES[escape])
            elif escape == "u" and self._peek(1) == "{":
                end = self.text.find("}", self.index)
                if end < 0:
                    raise self._error("Unterminated unicode escape")
                digits = self.text[self.index + 2 : end]
                try:
                    chars.append(chr(int(digits, 16)))
                except ValueError:
                    raise self._error(f"Invalid unicode escape {digits!r}") from None
                self._advance(end + 1 - self.index)
            else:
                raise self._error(f"Invalid escape sequence \\{escape}")
        text = self.text[start : self.index]
        return LexToken(TokenType.STRING, text, line, column, "".join(chars))


def tokenize(text: str) -> list[LexToken]:
    return Lexer(text).tokens()
