from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable
from urllib.parse import unquote, urlparse

from tessera.config import TesseraConfig
from tessera.edits import Position, compute_line_starts, offset_at
from tessera.files import FileResolver
from tessera.typesystem.catalog import TypeProvider

logger = logging.getLogger(__name__)

TextSource = Callable[[str], "str | None"]


def uri_to_path(uri: str) -> Path:
    parsed = urlparse(uri)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    return Path(uri)


def file_text_source(uri: str) -> str | None:
    path = uri_to_path(uri)
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None


@dataclass(frozen=True)
class CompiledContext:
    """What the analyzer knows about the host document's environment."""

    uri: str
    types: TypeProvider


@dataclass(frozen=True)
class DocumentSnapshot:
    uri: str
    text: str
    line_starts: tuple[int, ...]
    compiled: CompiledContext
    file_resolver: FileResolver
    configuration: TesseraConfig

    def offset_at(self, position: Position) -> int:
        return offset_at(self.text, self.line_starts, position)


class CompilationManager:
    """Hands out immutable per-request snapshots of host documents."""

    def __init__(
        self,
        *,
        types: TypeProvider,
        file_resolver: FileResolver,
        configuration: TesseraConfig,
        text_source: TextSource = file_text_source,
    ) -> None:
        self.types = types
        self.file_resolver = file_resolver
        self.configuration = configuration
        self.text_source = text_source

    def get_compilation(self, uri: str) -> DocumentSnapshot | None:
        text = self.text_source(uri)
        if text is None:
            logger.debug("No document text available for %s", uri)
            return None
        return DocumentSnapshot(
            uri=uri,
            text=text,
            line_starts=compute_line_starts(text),
            compiled=CompiledContext(uri=uri, types=self.types),
            file_resolver=self.file_resolver,
            configuration=self.configuration,
        )
