from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from pathlib import Path
from typing import TypeAlias
import tomllib

from tessera.syntax.printer import IndentKindOption, NewlineOption, PrintOptions

DEFAULT_CONFIG_NAME = "tessera.toml"
DEFAULT_ARM_ENDPOINT = "https://management.azure.com"
DEFAULT_FETCH_TIMEOUT_SECONDS = 30.0

TomlScalar: TypeAlias = str | int | float | bool | None | date | datetime | time
TomlValue: TypeAlias = TomlScalar | list["TomlValue"] | dict[str, "TomlValue"]
TomlTable: TypeAlias = dict[str, TomlValue]


def _load_toml(path: Path) -> TomlTable:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError:
        return {}
    try:
        data = tomllib.loads(raw)
    except tomllib.TOMLDecodeError:
        return {}
    return data if isinstance(data, dict) else {}


def load_config(root: Path | None = None, config_path: Path | None = None) -> TomlTable:
    if config_path is None:
        base = root if root is not None else Path.cwd()
        config_path = base / DEFAULT_CONFIG_NAME
    return _load_toml(config_path)


def _section(data: TomlTable, name: str) -> TomlTable:
    section = data.get(name, {})
    return section if isinstance(section, dict) else {}


def _normalize_name_list(value: TomlValue) -> list[str]:
    items: list[str] = []
    if value is None:
        return items
    if isinstance(value, str):
        items = [part.strip() for part in value.split(",") if part.strip()]
    elif isinstance(value, (list, tuple, set)):
        for item in value:
            if isinstance(item, str):
                items.extend([part.strip() for part in item.split(",") if part.strip()])
    return [item for item in items if item]


def _as_bool(value: TomlValue) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return False


def _as_int(value: TomlValue, default: int) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return default
    return default


def print_options(section: TomlTable | None) -> PrintOptions:
    if not section:
        return PrintOptions()
    newline = str(section.get("newline", NewlineOption.LF.value)).strip().lower()
    indent_kind = str(section.get("indent_kind", IndentKindOption.SPACE.value)).strip().lower()
    indent_size = _as_int(section.get("indent_size"), 2)
    return PrintOptions(
        newline=NewlineOption.CRLF if newline == NewlineOption.CRLF else NewlineOption.LF,
        indent_kind=(
            IndentKindOption.TAB if indent_kind == IndentKindOption.TAB else IndentKindOption.SPACE
        ),
        indent_size=indent_size if indent_size > 0 else 2,
        insert_final_newline=_as_bool(section.get("insert_final_newline")),
    )


@dataclass(frozen=True)
class TesseraConfig:
    printer: PrintOptions = PrintOptions()
    types_index: str | None = None
    fetch_endpoint: str = DEFAULT_ARM_ENDPOINT
    fetch_timeout_seconds: float = DEFAULT_FETCH_TIMEOUT_SECONDS
    retain: frozenset[str] = frozenset()

    @classmethod
    def from_table(cls, data: TomlTable, *, root: Path | None = None) -> "TesseraConfig":
        types = _section(data, "types")
        fetch = _section(data, "fetch")
        normalization = _section(data, "normalization")
        index = types.get("index")
        types_index = None
        if isinstance(index, str) and index.strip():
            index_path = Path(index.strip())
            if root is not None and not index_path.is_absolute():
                index_path = root / index_path
            types_index = index_path.as_posix()
        endpoint = fetch.get("endpoint")
        timeout = fetch.get("timeout_seconds")
        return cls(
            printer=print_options(_section(data, "printer")),
            types_index=types_index,
            fetch_endpoint=(
                endpoint.rstrip("/")
                if isinstance(endpoint, str) and endpoint.strip()
                else DEFAULT_ARM_ENDPOINT
            ),
            fetch_timeout_seconds=(
                float(timeout)
                if isinstance(timeout, (int, float)) and not isinstance(timeout, bool) and timeout > 0
                else DEFAULT_FETCH_TIMEOUT_SECONDS
            ),
            retain=frozenset(_normalize_name_list(normalization.get("retain"))),
        )


def load_tessera_config(
    root: Path | None = None, config_path: Path | None = None
) -> TesseraConfig:
    data = load_config(root=root, config_path=config_path)
    if config_path is not None and root is None:
        root = config_path.parent
    return TesseraConfig.from_table(data, root=root or Path.cwd())
