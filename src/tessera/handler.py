"""Insert-resource request pipeline.

document -> resource id -> type match -> fetch -> declaration ->
normalization -> edit. Missing inputs end the request quietly with no
edit; failures past the fetch propagate and nothing is applied.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from tessera.declaration import synthesize
from tessera.document import CompilationManager
from tessera.edits import EditDescriptor, Position, make_edit
from tessera.fetch import ResourceFetcher
from tessera.normalize import DeclarationNormalizer, ViewFactory
from tessera.resource_id import parse_resource_id
from tessera.semantics import SemanticView
from tessera.typesystem.catalog import match_type

logger = logging.getLogger(__name__)

EditApplier = Callable[[EditDescriptor], None]


@dataclass(frozen=True)
class InsertResourceParams:
    uri: str
    position: Position
    resource_id: str | None


def _discard_edit(edit: EditDescriptor) -> None:
    return None


class InsertResourceHandler:
    def __init__(
        self,
        documents: CompilationManager,
        fetcher: ResourceFetcher,
        applier: EditApplier = _discard_edit,
        *,
        view_factory: ViewFactory = SemanticView.build,
    ) -> None:
        self.documents = documents
        self.fetcher = fetcher
        self.applier = applier
        self.view_factory = view_factory

    def handle(self, params: InsertResourceParams) -> EditDescriptor | None:
        try:
            return self._handle(params)
        except Exception:
            logger.exception("Failed to insert resource %s", params.resource_id)
            raise

    def _handle(self, params: InsertResourceParams) -> EditDescriptor | None:
        snapshot = self.documents.get_compilation(params.uri)
        if snapshot is None:
            logger.debug("Document %s is not available", params.uri)
            return None
        resource_id = parse_resource_id(params.resource_id)
        if resource_id is None:
            logger.debug("Could not parse resource id %r", params.resource_id)
            return None
        fully_qualified_type = resource_id.fully_qualified_type
        descriptor = match_type(
            snapshot.compiled.types.available_types(), fully_qualified_type
        )
        if descriptor is None:
            logger.debug("No known type matches %s", fully_qualified_type)
            return None
        payload = self.fetcher.fetch(resource_id, descriptor.api_version)
        if payload is None:
            logger.debug("No payload returned for %s", resource_id.fully_qualified_id)
            return None

        declaration = synthesize(resource_id, descriptor, payload)
        offset = snapshot.offset_at(params.position)
        normalizer = DeclarationNormalizer(
            snapshot.compiled,
            snapshot.file_resolver,
            snapshot.configuration,
            view_factory=self.view_factory,
        )
        text = normalizer.normalize(declaration)

        edit = make_edit(snapshot.uri, snapshot.line_starts, len(snapshot.text), offset, text)
        self.applier(edit)
        logger.info(
            "Inserted %s as %s at %d:%d",
            resource_id.fully_qualified_id,
            descriptor.format_name(),
            *edit.range.start,
        )
        return edit
