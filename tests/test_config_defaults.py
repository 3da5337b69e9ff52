from __future__ import annotations

from pathlib import Path
import textwrap

from tessera.config import (
    DEFAULT_ARM_ENDPOINT,
    DEFAULT_FETCH_TIMEOUT_SECONDS,
    TesseraConfig,
    load_config,
    load_tessera_config,
    print_options,
)
from tessera.syntax.printer import IndentKindOption, NewlineOption, PrintOptions


def test_load_tessera_config_reads_toml(tmp_path: Path) -> None:
    config_path = tmp_path / "tessera.toml"
    config_path.write_text(
        textwrap.dedent(
            """
            [printer]
            newline = "CRLF"
            indent_kind = "tab"
            insert_final_newline = true

            [types]
            index = "types/index.json"

            [fetch]
            endpoint = "https://arm.example/"
            timeout_seconds = 5

            [normalization]
            retain = ["id", "provisioningState, etag"]
            """
        ).strip()
        + "\n"
    )
    config = load_tessera_config(config_path=config_path)
    assert config.printer == PrintOptions(
        newline=NewlineOption.CRLF,
        indent_kind=IndentKindOption.TAB,
        insert_final_newline=True,
    )
    assert config.types_index == (tmp_path / "types" / "index.json").as_posix()
    assert config.fetch_endpoint == "https://arm.example"
    assert config.fetch_timeout_seconds == 5.0
    assert config.retain == frozenset({"id", "provisioningState", "etag"})


def test_missing_config_uses_defaults(tmp_path: Path) -> None:
    assert load_config(root=tmp_path) == {}
    config = load_tessera_config(root=tmp_path)
    assert config == TesseraConfig()
    assert config.fetch_endpoint == DEFAULT_ARM_ENDPOINT
    assert config.fetch_timeout_seconds == DEFAULT_FETCH_TIMEOUT_SECONDS


def test_unreadable_toml_is_ignored(tmp_path: Path) -> None:
    (tmp_path / "tessera.toml").write_text("[printer\nnewline = ")
    assert load_config(root=tmp_path) == {}


def test_invalid_values_fall_back(tmp_path: Path) -> None:
    config = TesseraConfig.from_table(
        {
            "printer": {"indent_size": "zero", "newline": "weird"},
            "types": {"index": "  "},
            "fetch": {"endpoint": "", "timeout_seconds": True},
            "normalization": {"retain": 3},
        },
        root=tmp_path,
    )
    assert config == TesseraConfig()


def test_absolute_index_path_is_kept(tmp_path: Path) -> None:
    index = tmp_path / "elsewhere" / "index.json"
    config = TesseraConfig.from_table({"types": {"index": str(index)}}, root=Path("/ignored"))
    assert config.types_index == index.as_posix()


def test_print_options_values() -> None:
    assert print_options(None) == PrintOptions()
    assert print_options({"indent_size": 4, "insert_final_newline": "yes"}) == PrintOptions(
        indent_size=4, insert_final_newline=True
    )
    assert print_options({"indent_size": -1}).indent_size == 2
    assert print_options({"indent_size": "3"}).indent_size == 3
