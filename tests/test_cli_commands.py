from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from tessera import cli
from tests.schema_helpers import (
    WIDGET_DECLARATION,
    WIDGET_DEFINITIONS,
    WIDGET_ID,
    WIDGET_INDEX,
    WIDGET_PAYLOAD,
)


def _workspace(root: Path) -> tuple[Path, Path]:
    types = root / "types"
    types.mkdir()
    (types / "index.json").write_text(json.dumps(WIDGET_INDEX), encoding="utf-8")
    (types / "test.json").write_text(json.dumps(WIDGET_DEFINITIONS), encoding="utf-8")
    config = root / "tessera.toml"
    config.write_text('[types]\nindex = "types/index.json"\n', encoding="utf-8")
    payload = root / "widget.json"
    payload.write_text(json.dumps(WIDGET_PAYLOAD), encoding="utf-8")
    return config, payload


def _invoke(args: list[str]):
    return CliRunner().invoke(cli.app, args)


def test_cli_help_lists_commands() -> None:
    result = _invoke(["--help"])
    assert result.exit_code == 0
    for name in ("insert", "render", "types", "lsp"):
        assert name in result.output


def test_types_lists_catalog(tmp_path: Path) -> None:
    config, _ = _workspace(tmp_path)
    result = _invoke(["types", "--config", str(config), "--filter", "WIDGETS"])
    assert result.exit_code == 0
    assert result.output.splitlines() == [
        "Test.Provider/widgets@2021-01-01",
        "Test.Provider/widgets@2023-05-01",
        "Test.Provider/widgets@2023-05-01-preview",
    ]


def test_types_json(tmp_path: Path) -> None:
    config, _ = _workspace(tmp_path)
    result = _invoke(["types", "--config", str(config), "--filter", "gadgets", "--json"])
    assert result.exit_code == 0
    assert json.loads(result.output) == [
        {"type": "Test.Provider/gadgets", "api_version": "2022-01-01"}
    ]


def test_types_builtin_catalog() -> None:
    result = _invoke(["types", "--filter", "storageAccounts"])
    assert result.exit_code == 0
    assert "Microsoft.Storage/storageAccounts@2023-01-01" in result.output.splitlines()


def test_render_prints_declaration(tmp_path: Path) -> None:
    config, payload = _workspace(tmp_path)
    result = _invoke(
        ["render", "--config", str(config), "--resource-id", WIDGET_ID, "--payload", str(payload)]
    )
    assert result.exit_code == 0
    assert result.output == WIDGET_DECLARATION + "\n"


def test_render_without_match_exits_one(tmp_path: Path) -> None:
    config, payload = _workspace(tmp_path)
    result = _invoke(
        [
            "render",
            "--config",
            str(config),
            "--resource-id",
            WIDGET_ID.replace("/widgets/", "/gizmos/"),
            "--payload",
            str(payload),
        ]
    )
    assert result.exit_code == 1


def test_insert_prints_edit(tmp_path: Path) -> None:
    config, payload = _workspace(tmp_path)
    target = tmp_path / "main.bicep"
    target.write_text("// a\n// b\n", encoding="utf-8")
    result = _invoke(
        [
            "insert",
            str(target),
            "--line",
            "1",
            "--resource-id",
            WIDGET_ID,
            "--payload",
            str(payload),
            "--config",
            str(config),
        ]
    )
    assert result.exit_code == 0
    edit = json.loads(result.output)
    assert edit["uri"] == target.resolve().as_uri()
    assert edit["start"] == edit["end"] == [1, 0]
    assert edit["new_text"] == WIDGET_DECLARATION
    assert target.read_text(encoding="utf-8") == "// a\n// b\n"


def test_insert_write_updates_file(tmp_path: Path) -> None:
    config, payload = _workspace(tmp_path)
    target = tmp_path / "main.bicep"
    target.write_text("// a\n\n// b\n", encoding="utf-8")
    result = _invoke(
        [
            "insert",
            str(target),
            "--line",
            "1",
            "--resource-id",
            WIDGET_ID,
            "--payload",
            str(payload),
            "--config",
            str(config),
            "--write",
        ]
    )
    assert result.exit_code == 0
    assert target.read_text(encoding="utf-8") == "// a\n" + WIDGET_DECLARATION + "\n// b\n"


def test_insert_reports_bad_payload(tmp_path: Path) -> None:
    config, _ = _workspace(tmp_path)
    payload = tmp_path / "broken.json"
    payload.write_text("{not json", encoding="utf-8")
    target = tmp_path / "main.bicep"
    target.write_text("", encoding="utf-8")
    result = _invoke(
        [
            "insert",
            str(target),
            "--line",
            "0",
            "--resource-id",
            WIDGET_ID,
            "--payload",
            str(payload),
            "--config",
            str(config),
        ]
    )
    assert result.exit_code == 2
    assert "Failed to insert resource" in result.output


def test_unknown_log_level_is_rejected() -> None:
    result = _invoke(["--log-level", "chatty", "types"])
    assert result.exit_code != 0
