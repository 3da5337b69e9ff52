from __future__ import annotations

import logging
from typing import Callable

from tessera.cancellation import check_cancelled
from tessera.config import TesseraConfig
from tessera.document import CompiledContext
from tessera.exceptions import NormalizationError, ParseError, SemanticViewError
from tessera.files import FileResolver
from tessera.rewriters import prune_read_only, recase
from tessera.semantics import SemanticView
from tessera.syntax import factory
from tessera.syntax.nodes import Declaration, Program
from tessera.syntax.parser import parse_program
from tessera.syntax.printer import PrintOptions, print_program

logger = logging.getLogger(__name__)

# Recase/prune runs exactly this many times; there is no fixed-point exit.
MAX_ITERATIONS = 5

ViewFactory = Callable[
    [CompiledContext, Program, FileResolver, TesseraConfig], SemanticView
]


class DeclarationNormalizer:
    """Brings a synthesized declaration in line with its type schema.

    Every sub-pass works on text: the tree is printed, read back and a new
    semantic view is derived before the next rewrite, because renaming or
    removing a property changes what the analyzer sees beneath it.
    """

    def __init__(
        self,
        context: CompiledContext,
        file_resolver: FileResolver,
        configuration: TesseraConfig,
        *,
        view_factory: ViewFactory = SemanticView.build,
        max_iterations: int = MAX_ITERATIONS,
    ) -> None:
        self.context = context
        self.file_resolver = file_resolver
        self.configuration = configuration
        self.view_factory = view_factory
        self.max_iterations = max_iterations
        self.options: PrintOptions = configuration.printer

    def _view(self, text: str, iteration: int) -> tuple[Program, SemanticView]:
        try:
            program = parse_program(text)
            view = self.view_factory(
                self.context, program, self.file_resolver, self.configuration
            )
        except (ParseError, SemanticViewError) as exc:
            raise NormalizationError(
                f"Failed to build semantic view: {exc}", iteration=iteration
            ) from exc
        return program, view

    def normalize_program(self, program: Program) -> str:
        text = print_program(program, self.options)
        for iteration in range(self.max_iterations):
            check_cancelled()
            current, view = self._view(text, iteration)
            text = print_program(recase(current, view), self.options)
            current, view = self._view(text, iteration)
            text = print_program(prune_read_only(current, view), self.options)
            logger.debug("Normalization iteration %d complete", iteration + 1)
        try:
            final = parse_program(text)
        except ParseError as exc:
            raise NormalizationError(
                f"Normalized text no longer parses: {exc}", iteration=self.max_iterations
            ) from exc
        return print_program(final, self.options)

    def normalize(self, declaration: Declaration) -> str:
        return self.normalize_program(factory.create_program((declaration,)))
