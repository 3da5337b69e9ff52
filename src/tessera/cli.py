from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer

from tessera.cancellation import cancellation_scope
from tessera.config import TesseraConfig, load_tessera_config
from tessera.edits import EditDescriptor, apply_edit
from tessera.exceptions import TesseraError
from tessera.fetch import FileResourceFetcher, ResourceFetcher
from tessera.handler import InsertResourceHandler, InsertResourceParams
from tessera.runtime import (
    build_arm_fetcher,
    build_compilation_manager,
    type_provider_for,
)
from tessera.schema import TextEditDTO, TypeDescriptorDTO

app = typer.Typer(add_completion=False)

_RENDER_URI = "untitled:declaration"
_LOG_LEVELS = ("debug", "info", "warning", "error")


@app.callback()
def main(
    log_level: str = typer.Option(
        "warning", "--log-level", help="One of debug, info, warning, error."
    ),
) -> None:
    """Insert live cloud resources as declarations."""
    level = log_level.strip().lower()
    if level not in _LOG_LEVELS:
        raise typer.BadParameter(f"unknown log level {log_level!r}")
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(levelname)s %(name)s: %(message)s",
    )


def _configuration(config: Optional[Path]) -> TesseraConfig:
    return load_tessera_config(config_path=config)


def _fetcher(payload: Optional[Path], configuration: TesseraConfig) -> ResourceFetcher:
    if payload is not None:
        return FileResourceFetcher(payload)
    return build_arm_fetcher(configuration)


def _run(handler: InsertResourceHandler, params: InsertResourceParams) -> EditDescriptor | None:
    try:
        with cancellation_scope():
            return handler.handle(params)
    except (TesseraError, OSError) as exc:
        typer.echo(f"Failed to insert resource: {exc}", err=True)
        raise typer.Exit(code=2)


@app.command()
def insert(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    line: int = typer.Option(..., "--line", min=0, help="Zero-based caret line."),
    character: int = typer.Option(
        0, "--character", min=0, help="Zero-based caret column, counted in code points."
    ),
    resource_id: str = typer.Option(..., "--resource-id"),
    payload: Optional[Path] = typer.Option(
        None, "--payload", exists=True, dir_okay=False, help="Resource JSON captured earlier."
    ),
    config: Optional[Path] = typer.Option(None, "--config"),
    write: bool = typer.Option(False, "--write", help="Apply the edit to PATH."),
) -> None:
    """Insert the declaration for RESOURCE_ID into PATH at the caret."""
    configuration = _configuration(config)
    uri = path.resolve().as_uri()
    handler = InsertResourceHandler(
        build_compilation_manager(configuration),
        _fetcher(payload, configuration),
    )
    edit = _run(
        handler,
        InsertResourceParams(uri=uri, position=(line, character), resource_id=resource_id),
    )
    if edit is None:
        typer.echo("No resource inserted.", err=True)
        raise typer.Exit(code=1)
    if write:
        text = path.read_text(encoding="utf-8")
        path.write_text(apply_edit(text, edit), encoding="utf-8")
        typer.echo(f"Inserted {resource_id} into {path}")
        return
    dto = TextEditDTO(
        uri=edit.uri,
        start=edit.range.start,
        end=edit.range.end,
        new_text=edit.new_text,
    )
    typer.echo(json.dumps(dto.model_dump(), indent=2))


@app.command()
def render(
    resource_id: str = typer.Option(..., "--resource-id"),
    payload: Path = typer.Option(..., "--payload", exists=True, dir_okay=False),
    config: Optional[Path] = typer.Option(None, "--config"),
) -> None:
    """Print the normalized declaration for a captured resource body."""
    configuration = _configuration(config)
    documents = build_compilation_manager(
        configuration,
        text_source=lambda uri: "" if uri == _RENDER_URI else None,
    )
    handler = InsertResourceHandler(documents, FileResourceFetcher(payload))
    edit = _run(
        handler,
        InsertResourceParams(uri=_RENDER_URI, position=(0, 0), resource_id=resource_id),
    )
    if edit is None:
        typer.echo("No declaration rendered.", err=True)
        raise typer.Exit(code=1)
    typer.echo(edit.new_text)


@app.command("types")
def list_types(
    filter_text: Optional[str] = typer.Option(None, "--filter"),
    as_json: bool = typer.Option(False, "--json"),
    config: Optional[Path] = typer.Option(None, "--config"),
) -> None:
    """List the resource types the catalog knows about."""
    provider = type_provider_for(_configuration(config))
    needle = (filter_text or "").casefold()
    descriptors = [
        descriptor
        for descriptor in provider.available_types()
        if needle in descriptor.fully_qualified_type.casefold()
    ]
    if as_json:
        typer.echo(
            json.dumps(
                [
                    TypeDescriptorDTO(
                        type=descriptor.fully_qualified_type,
                        api_version=descriptor.api_version,
                    ).model_dump()
                    for descriptor in descriptors
                ],
                indent=2,
            )
        )
        return
    for descriptor in descriptors:
        typer.echo(descriptor.format_name())


@app.command()
def lsp() -> None:
    """Run the language server on stdio."""
    from tessera.server import start

    start()
