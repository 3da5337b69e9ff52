from __future__ import annotations

from decimal import Decimal

from tessera.json_types import JSONValue, JsonKind, json_kind
from tessera.syntax import factory
from tessera.syntax.nodes import Expression

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


def number_text(value: int | float | Decimal) -> str:
    if isinstance(value, float):
        return repr(value)
    return str(value)


def lower(value: JSONValue) -> Expression:
    """Transliterate a JSON value into declaration syntax.

    Numbers that are not 32-bit integers become string literals holding
    their decimal text; the declaration language has no literal for them.
    """
    kind = json_kind(value)
    match kind:
        case JsonKind.OBJECT:
            return factory.create_object(
                factory.create_property(str(key), lower(item))
                for key, item in value.items()
            )
        case JsonKind.ARRAY:
            return factory.create_array(lower(item) for item in value)
        case JsonKind.STRING:
            return factory.create_string(value)
        case JsonKind.NUMBER:
            if isinstance(value, int) and INT32_MIN <= value <= INT32_MAX:
                return factory.create_integer(value)
            return factory.create_string(number_text(value))
        case JsonKind.BOOL:
            return factory.create_boolean(value)
        case JsonKind.NULL:
            return factory.create_null()
