"""Text spans, line/column mapping and the single edit handed to the host."""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from typing import Sequence, Tuple

from tessera.invariants import never

Position = Tuple[int, int]


def compute_line_starts(text: str) -> tuple[int, ...]:
    """Offsets at which each line begins; ``\\r\\n``, ``\\r`` and ``\\n`` end lines."""
    starts = [0]
    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        if char == "\r":
            if index + 1 < length and text[index + 1] == "\n":
                index += 1
            starts.append(index + 1)
        elif char == "\n":
            starts.append(index + 1)
        index += 1
    return tuple(starts)


def offset_at(text: str, line_starts: Sequence[int], position: Position) -> int:
    """Offset of an LSP position; characters past the line end clamp to it."""
    line, character = position
    if line < 0:
        return 0
    if line >= len(line_starts):
        return len(text)
    start = line_starts[line]
    end = line_starts[line + 1] if line + 1 < len(line_starts) else len(text)
    while end > start and text[end - 1] in "\r\n":
        end -= 1
    return min(start + max(0, character), end)


def position_at(line_starts: Sequence[int], offset: int) -> Position:
    if offset < 0:
        never("negative offset", offset=offset)
    line = bisect_right(line_starts, offset) - 1
    return (line, offset - line_starts[line])


@dataclass(frozen=True)
class TextSpan:
    offset: int
    length: int = 0

    def __post_init__(self) -> None:
        if self.offset < 0 or self.length < 0:
            never("invalid text span", offset=self.offset, length=self.length)

    @property
    def end(self) -> int:
        return self.offset + self.length


@dataclass(frozen=True)
class TextRange:
    start: Position
    end: Position


@dataclass(frozen=True)
class EditDescriptor:
    uri: str
    range: TextRange
    new_text: str
    span: TextSpan


def span_to_range(line_starts: Sequence[int], span: TextSpan) -> TextRange:
    return TextRange(
        start=position_at(line_starts, span.offset),
        end=position_at(line_starts, span.end),
    )


def make_edit(
    uri: str,
    line_starts: Sequence[int],
    text_length: int,
    insertion_offset: int,
    text: str,
) -> EditDescriptor:
    """Build a pure insertion at ``insertion_offset``; nothing is replaced."""
    span = TextSpan(insertion_offset, 0)
    if span.end > text_length:
        never(
            "edit span past end of document",
            offset=insertion_offset,
            length=text_length,
        )
    return EditDescriptor(
        uri=uri,
        range=span_to_range(line_starts, span),
        new_text=text,
        span=span,
    )


def apply_edit(text: str, edit: EditDescriptor) -> str:
    return text[: edit.span.offset] + edit.new_text + text[edit.span.end :]
