"""JSON-like value types for live resource payloads.

Payloads arrive from ``json.loads`` so objects keep their key order; numbers
with a fractional part may be ``Decimal`` when the fetcher asks for exact
text.
"""

from __future__ import annotations

from decimal import Decimal
from enum import StrEnum
from typing import TypeAlias

from tessera.exceptions import UnsupportedValueKind


JSONScalar: TypeAlias = str | int | float | Decimal | bool | None
JSONValue: TypeAlias = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]
JSONObject: TypeAlias = dict[str, JSONValue]
JSONArray: TypeAlias = list[JSONValue]


class JsonNumber(Decimal):
    """A fractional or exponent JSON number that remembers its source text.

    Compares and computes like ``Decimal``; ``str()`` gives the token as it
    appeared in the payload, so ``1e5`` stays ``1e5``.
    """

    def __new__(cls, text: str) -> "JsonNumber":
        number = super().__new__(cls, text)
        number.text = text
        return number

    def __str__(self) -> str:
        return self.text


class JsonKind(StrEnum):
    OBJECT = "object"
    ARRAY = "array"
    STRING = "string"
    NUMBER = "number"
    BOOL = "bool"
    NULL = "null"


def json_kind(value: object) -> JsonKind:
    # bool is an int subclass; it has to be tested first.
    if value is None:
        return JsonKind.NULL
    if isinstance(value, bool):
        return JsonKind.BOOL
    if isinstance(value, (int, float, Decimal)):
        return JsonKind.NUMBER
    if isinstance(value, str):
        return JsonKind.STRING
    if isinstance(value, list):
        return JsonKind.ARRAY
    if isinstance(value, dict):
        return JsonKind.OBJECT
    raise UnsupportedValueKind(value)
