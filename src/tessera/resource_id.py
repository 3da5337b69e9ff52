"""Parsing of Azure Resource Manager resource ids.

Only the shape of the id matters here: the resource provider namespace,
the chain of type segments and the chain of names. Extension resources
(``.../providers/A/b/c/providers/X/y/z``) resolve to the last provider
section.
"""

from __future__ import annotations

from dataclasses import dataclass

RESOURCES_NAMESPACE = "Microsoft.Resources"

_SUBSCRIPTIONS = "subscriptions"
_RESOURCE_GROUPS = "resourcegroups"
_PROVIDERS = "providers"


@dataclass(frozen=True)
class ResourceIdentifier:
    fully_qualified_id: str
    provider_namespace: str
    type_segments: tuple[str, ...]
    name_hierarchy: tuple[str, ...]

    @property
    def fully_qualified_type(self) -> str:
        return "/".join((self.provider_namespace, *self.type_segments))

    @property
    def name(self) -> str:
        return self.name_hierarchy[-1]


def _scope_identifier(text: str, segments: list[str]) -> ResourceIdentifier | None:
    # /subscriptions/{id} and /subscriptions/{id}/resourceGroups/{name}
    if len(segments) == 2 and segments[0].lower() == _SUBSCRIPTIONS:
        return ResourceIdentifier(text, RESOURCES_NAMESPACE, ("subscriptions",), (segments[1],))
    if (
        len(segments) == 4
        and segments[0].lower() == _SUBSCRIPTIONS
        and segments[2].lower() == _RESOURCE_GROUPS
    ):
        return ResourceIdentifier(
            text, RESOURCES_NAMESPACE, ("resourceGroups",), (segments[3],)
        )
    return None


def parse_resource_id(text: str | None) -> ResourceIdentifier | None:
    if not text:
        return None
    normalized = text.strip()
    if not normalized.startswith("/"):
        return None
    segments = normalized.strip("/").split("/")
    if any(not segment for segment in segments):
        return None
    provider_indexes = [
        index for index, segment in enumerate(segments) if segment.lower() == _PROVIDERS
    ]
    if not provider_indexes:
        return _scope_identifier(normalized.rstrip("/"), segments)
    start = provider_indexes[-1]
    tail = segments[start + 1 :]
    # namespace, then alternating type/name pairs
    if len(tail) < 3 or (len(tail) - 1) % 2 != 0:
        return None
    namespace = tail[0]
    pairs = tail[1:]
    types = tuple(pairs[0::2])
    names = tuple(pairs[1::2])
    return ResourceIdentifier(
        fully_qualified_id=normalized.rstrip("/"),
        provider_namespace=namespace,
        type_segments=types,
        name_hierarchy=names,
    )
