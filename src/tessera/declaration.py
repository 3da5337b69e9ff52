from __future__ import annotations

import re

from tessera.json_types import JSONValue
from tessera.lowering import lower
from tessera.resource_id import ResourceIdentifier
from tessera.syntax import factory
from tessera.syntax.nodes import Declaration
from tessera.typesystem.catalog import TypeDescriptor

_NON_LETTER_RE = re.compile(r"[^a-zA-Z]")


def sanitize_identifier(name: str) -> str:
    """Keep ASCII letters only; the result may be empty."""
    return _NON_LETTER_RE.sub("", name)


def synthesize(
    identifier: ResourceIdentifier,
    descriptor: TypeDescriptor,
    body: JSONValue,
) -> Declaration:
    # Always a new resource, never an ``existing`` reference.
    return factory.create_resource_declaration(
        sanitize_identifier(identifier.name_hierarchy[-1]),
        descriptor.format_name(),
        lower(body),
    )
