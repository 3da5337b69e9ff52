from __future__ import annotations

import logging
import re
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Sequence

from pydantic import BaseModel, Field

from tessera.files import FileResolver, LocalFileResolver
from tessera.typesystem.schema import SchemaType, TypeDefinitions, load_definitions

logger = logging.getLogger(__name__)

BUILTIN_INDEX_PATH = Path(__file__).resolve().parents[1] / "data" / "types" / "index.json"

_DATED_VERSION_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})(?:-(.+))?$")


@dataclass(frozen=True)
class TypeDescriptor:
    fully_qualified_type: str
    api_version: str

    def format_name(self) -> str:
        return f"{self.fully_qualified_type}@{self.api_version}"


def api_version_key(version: str) -> tuple:
    """Sort key placing newer API versions last.

    Date-stamped versions rank above any other text. Among them the date
    decides, a stable version beats a suffixed one on the same date, and
    suffixes compare case-insensitively. Other versions order by their
    case-folded text.
    """
    match = _DATED_VERSION_RE.match(version.strip())
    if match is None:
        return (0, (), 0, version.strip().casefold())
    year, month, day, suffix = match.groups()
    date = (int(year), int(month), int(day))
    if suffix is None:
        return (1, date, 1, "")
    return (1, date, 0, suffix.casefold())


def match_type(
    catalog: Iterable[TypeDescriptor], type_string: str
) -> TypeDescriptor | None:
    """Pick the newest descriptor whose type equals ``type_string``.

    Types compare case-insensitively. Among descriptors with equal version
    keys the first one in catalog order wins.
    """
    folded = type_string.casefold()
    best: TypeDescriptor | None = None
    best_key: tuple | None = None
    for descriptor in catalog:
        if descriptor.fully_qualified_type.casefold() != folded:
            continue
        key = api_version_key(descriptor.api_version)
        if best_key is None or key > best_key:
            best, best_key = descriptor, key
    return best


def split_type_reference(text: str) -> TypeDescriptor | None:
    type_name, separator, version = text.rpartition("@")
    if not separator or not type_name or not version:
        return None
    return TypeDescriptor(type_name, version)


class IndexEntryDTO(BaseModel):
    type: str
    api_version: str = Field(alias="apiVersion")
    file: str
    body: str


class TypeIndexDTO(BaseModel):
    resources: List[IndexEntryDTO] = []


@dataclass(frozen=True)
class ResourceSchema:
    descriptor: TypeDescriptor
    body: SchemaType | None
    definitions: TypeDefinitions


class TypeProvider:
    """Catalog of known resource types plus lazily loaded body schemas.

    The index is read once; definition files are read on first use through
    the caller's file resolver and cached for the life of the provider.
    """

    def __init__(self, index_path: str, entries: Sequence[IndexEntryDTO]) -> None:
        self.index_path = index_path
        self._entries = tuple(entries)
        self._descriptors = tuple(
            TypeDescriptor(entry.type, entry.api_version) for entry in self._entries
        )
        self._definitions: dict[str, TypeDefinitions] = {}
        self._lock = threading.Lock()

    @classmethod
    def load(cls, index_path: str | Path, resolver: FileResolver | None = None) -> "TypeProvider":
        resolver = resolver or LocalFileResolver()
        path = Path(index_path).as_posix()
        index = TypeIndexDTO.model_validate_json(resolver.read_text(path))
        logger.debug("Loaded %d resource types from %s", len(index.resources), path)
        return cls(path, index.resources)

    @classmethod
    def builtin(cls) -> "TypeProvider":
        return cls.load(BUILTIN_INDEX_PATH)

    def available_types(self) -> tuple[TypeDescriptor, ...]:
        return self._descriptors

    def _entry_for(self, descriptor: TypeDescriptor) -> IndexEntryDTO | None:
        folded_type = descriptor.fully_qualified_type.casefold()
        folded_version = descriptor.api_version.casefold()
        for entry in self._entries:
            if (
                entry.type.casefold() == folded_type
                and entry.api_version.casefold() == folded_version
            ):
                return entry
        return None

    def _definitions_for(self, file: str, resolver: FileResolver) -> TypeDefinitions:
        path = (Path(self.index_path).parent / file).as_posix()
        with self._lock:
            cached = self._definitions.get(path)
            if cached is None:
                cached = load_definitions(resolver.read_text(path))
                self._definitions[path] = cached
            return cached

    def schema_for(
        self, descriptor: TypeDescriptor, resolver: FileResolver
    ) -> ResourceSchema | None:
        entry = self._entry_for(descriptor)
        if entry is None:
            return None
        definitions = self._definitions_for(entry.file, resolver)
        return ResourceSchema(
            descriptor=TypeDescriptor(entry.type, entry.api_version),
            body=definitions.resolve(definitions.types.get(entry.body)),
            definitions=definitions,
        )
