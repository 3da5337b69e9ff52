from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from pygls.lsp.server import LanguageServer
from pygls.workspace import TextDocument
from pydantic import ValidationError
from lsprotocol.types import (
    ApplyWorkspaceEditParams,
    Position,
    Range,
    TextEdit,
    WorkspaceEdit,
)

from tessera import __version__
from tessera.cancellation import Deadline, cancellation_scope
from tessera.config import load_tessera_config
from tessera.edits import EditDescriptor
from tessera.edits import Position as EditPosition
from tessera.exceptions import TesseraError
from tessera.fetch import ResourceFetcher
from tessera.handler import InsertResourceHandler, InsertResourceParams
from tessera.invariants import never
from tessera.runtime import build_arm_fetcher, build_compilation_manager
from tessera.schema import InsertResourceRequest, InsertResourceResponse, TextEditDTO

logger = logging.getLogger(__name__)

server = LanguageServer("tessera", __version__)
INSERT_RESOURCE_COMMAND = "tessera.insertResource"


def _require_payload(payload: object, *, command: str) -> dict[str, object]:
    if payload is None:
        never("missing command payload", command=command)
    if not isinstance(payload, dict):
        never(
            "invalid command payload type",
            command=command,
            payload_type=type(payload).__name__,
        )
    return payload


def _workspace_text_source(ls: LanguageServer) -> Callable[[str], str | None]:
    def _read(uri: str) -> str | None:
        try:
            return ls.workspace.get_text_document(uri).source
        except OSError:
            return None

    return _read


def _from_client_position(
    document: TextDocument, line: int, character: int
) -> EditPosition:
    # Clients count UTF-16 code units by default; the pipeline counts code points.
    position = document.position_codec.position_from_client_units(
        document.lines, Position(line=line, character=character)
    )
    return (position.line, position.character)


def _to_client_range(document: TextDocument, edit: EditDescriptor) -> Range:
    codec = document.position_codec
    start_line, start_character = edit.range.start
    end_line, end_character = edit.range.end
    return Range(
        start=codec.position_to_client_units(
            document.lines, Position(line=start_line, character=start_character)
        ),
        end=codec.position_to_client_units(
            document.lines, Position(line=end_line, character=end_character)
        ),
    )


def _to_lsp_edit(edit: EditDescriptor, document: TextDocument) -> WorkspaceEdit:
    return WorkspaceEdit(
        changes={
            edit.uri: [
                TextEdit(range=_to_client_range(document, edit), new_text=edit.new_text)
            ]
        }
    )


def _edit_applier(
    ls: LanguageServer, document: TextDocument
) -> Callable[[EditDescriptor], None]:
    def _apply(edit: EditDescriptor) -> None:
        ls.workspace_apply_edit(
            ApplyWorkspaceEditParams(
                edit=_to_lsp_edit(edit, document), label="Insert resource"
            )
        )

    return _apply


def insert_resource(
    ls: LanguageServer,
    payload: dict[str, object],
    *,
    fetcher: ResourceFetcher | None = None,
) -> InsertResourceResponse:
    try:
        request = InsertResourceRequest.model_validate(payload)
    except ValidationError as exc:
        return InsertResourceResponse(errors=[str(exc)])

    uri = request.text_document.uri
    document = ls.workspace.get_text_document(uri)
    try:
        position = _from_client_position(
            document, request.position.line, request.position.character
        )
    except OSError:
        logger.debug("Document %s is not available", uri)
        return InsertResourceResponse()

    root = Path(ls.workspace.root_path) if ls.workspace.root_path else None
    configuration = load_tessera_config(root=root)
    documents = build_compilation_manager(
        configuration, text_source=_workspace_text_source(ls)
    )
    handler = InsertResourceHandler(
        documents,
        fetcher or build_arm_fetcher(configuration),
        _edit_applier(ls, document),
    )
    params = InsertResourceParams(
        uri=uri,
        position=position,
        resource_id=request.resource_id,
    )
    deadline = (
        Deadline.from_timeout_ms(request.timeout_ms) if request.timeout_ms else None
    )
    try:
        with cancellation_scope(deadline=deadline):
            edit = handler.handle(params)
    except (TesseraError, OSError) as exc:
        return InsertResourceResponse(errors=[f"Failed to insert resource: {exc}"])
    if edit is None:
        return InsertResourceResponse()
    client_range = _to_client_range(document, edit)
    return InsertResourceResponse(
        edits=[
            TextEditDTO(
                uri=edit.uri,
                start=(client_range.start.line, client_range.start.character),
                end=(client_range.end.line, client_range.end.character),
                new_text=edit.new_text,
            )
        ]
    )


@server.command(INSERT_RESOURCE_COMMAND)
def execute_insert_resource(ls: LanguageServer, payload: dict | None = None) -> dict:
    payload = _require_payload(payload, command=INSERT_RESOURCE_COMMAND)
    return insert_resource(ls, payload).model_dump()


def start(start_fn: Callable[[], None] | None = None) -> None:
    """Start the language server on stdio."""
    (start_fn or server.start_io)()


if __name__ == "__main__":  # pragma: no cover
    start()  # pragma: no cover
