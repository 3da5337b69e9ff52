"""Exception taxonomy for the declaration pipeline."""

from __future__ import annotations


class TesseraError(Exception):
    """Base class for failures raised by the declaration pipeline."""


class NeverThrown(RuntimeError):
    """Raised by ``never()`` when a path believed unreachable is reached."""

    def __init__(self, message: str, *, env: dict[str, object] | None = None):
        super().__init__(message)
        self.env = dict(env or {})


class SynthesisError(TesseraError):
    """Building a declaration from a live resource payload failed."""


class UnsupportedValueKind(SynthesisError):
    def __init__(self, value: object) -> None:
        super().__init__(
            f"Unsupported JSON value kind: {type(value).__name__}"
        )
        self.value = value


class ParseError(TesseraError):
    def __init__(self, message: str, *, line: int, column: int) -> None:
        super().__init__(f"{message} (line {line + 1}, column {column + 1})")
        self.line = line
        self.column = column


class SemanticViewError(TesseraError):
    """The analyzer was handed a tree it cannot describe."""


class NormalizationError(TesseraError):
    """The recase/prune loop could not rebuild its semantic view."""

    def __init__(self, message: str, *, iteration: int) -> None:
        super().__init__(f"{message} (iteration {iteration + 1})")
        self.iteration = iteration


NormalizationFailed = NormalizationError


class OperationCancelled(TesseraError):
    pass


class FetchError(TesseraError):
    """Live resource state could not be retrieved or decoded."""
