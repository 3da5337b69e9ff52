from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Protocol


class FileResolver(Protocol):
    def read_text(self, path: str) -> str:
        """Return the text of ``path`` or raise ``FileNotFoundError``."""


@dataclass(frozen=True)
class LocalFileResolver:
    encoding: str = "utf-8"

    def read_text(self, path: str) -> str:
        return Path(path).read_text(encoding=self.encoding)


@dataclass(frozen=True)
class InMemoryFileResolver:
    files: Mapping[str, str] = field(default_factory=dict)

    def read_text(self, path: str) -> str:
        key = Path(path).as_posix()
        if key not in self.files:
            raise FileNotFoundError(path)
        return self.files[key]
