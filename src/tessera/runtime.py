from __future__ import annotations

import threading
from pathlib import Path

from tessera.config import TesseraConfig
from tessera.document import CompilationManager, TextSource, file_text_source
from tessera.fetch import ArmResourceFetcher
from tessera.files import FileResolver, LocalFileResolver
from tessera.typesystem.catalog import BUILTIN_INDEX_PATH, TypeProvider

_PROVIDERS: dict[str, TypeProvider] = {}
_PROVIDERS_LOCK = threading.Lock()


def type_provider_for(
    configuration: TesseraConfig, resolver: FileResolver | None = None
) -> TypeProvider:
    """Return the process-wide provider for the configured type index."""
    index = configuration.types_index or Path(BUILTIN_INDEX_PATH).as_posix()
    with _PROVIDERS_LOCK:
        provider = _PROVIDERS.get(index)
        if provider is None:
            provider = TypeProvider.load(index, resolver or LocalFileResolver())
            _PROVIDERS[index] = provider
        return provider


def build_compilation_manager(
    configuration: TesseraConfig,
    *,
    text_source: TextSource = file_text_source,
    file_resolver: FileResolver | None = None,
) -> CompilationManager:
    resolver = file_resolver or LocalFileResolver()
    return CompilationManager(
        types=type_provider_for(configuration, resolver),
        file_resolver=resolver,
        configuration=configuration,
        text_source=text_source,
    )


def build_arm_fetcher(configuration: TesseraConfig) -> ArmResourceFetcher:
    return ArmResourceFetcher(
        endpoint=configuration.fetch_endpoint,
        timeout_seconds=configuration.fetch_timeout_seconds,
    )
