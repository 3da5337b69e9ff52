from __future__ import annotations

import pytest

from tessera.cancellation import CancellationToken, Deadline, cancellation_scope
from tessera.config import TesseraConfig
from tessera.declaration import synthesize
from tessera.exceptions import (
    NormalizationError,
    NormalizationFailed,
    OperationCancelled,
    SemanticViewError,
)
from tessera.normalize import MAX_ITERATIONS, DeclarationNormalizer
from tessera.resource_id import parse_resource_id
from tessera.rewriters import prune_read_only, recase
from tessera.semantics import SemanticView
from tessera.syntax.parser import parse_program
from tessera.syntax.printer import IndentKindOption, NewlineOption, PrintOptions, print_program
from tessera.typesystem.catalog import TypeDescriptor
from tests.schema_helpers import WIDGET_DECLARATION, WIDGET_ID, WIDGET_PAYLOAD, WIDGET_TYPE


def _declaration(payload=WIDGET_PAYLOAD):
    return synthesize(
        parse_resource_id(WIDGET_ID),
        TypeDescriptor(WIDGET_TYPE, "2023-05-01"),
        payload,
    )


class _CountingFactory:
    def __init__(self, fail_on_call: int | None = None) -> None:
        self.calls = 0
        self.fail_on_call = fail_on_call

    def __call__(self, context, program, file_resolver, configuration):
        self.calls += 1
        if self.calls == self.fail_on_call:
            raise SemanticViewError("malformed intermediate tree")
        return SemanticView.build(context, program, file_resolver, configuration)


def test_normalize_widget(widget_context, widget_resolver) -> None:
    normalizer = DeclarationNormalizer(widget_context, widget_resolver, TesseraConfig())
    assert normalizer.normalize(_declaration()) == WIDGET_DECLARATION


def test_normalize_runs_a_fixed_number_of_iterations(widget_context, widget_resolver) -> None:
    factory = _CountingFactory()
    normalizer = DeclarationNormalizer(
        widget_context, widget_resolver, TesseraConfig(), view_factory=factory
    )
    normalizer.normalize(_declaration({"name": "already-clean"}))
    assert MAX_ITERATIONS == 5
    assert factory.calls == 2 * MAX_ITERATIONS


def test_one_more_pass_changes_nothing(widget_context, widget_resolver) -> None:
    configuration = TesseraConfig()
    text = DeclarationNormalizer(widget_context, widget_resolver, configuration).normalize(
        _declaration()
    )
    program = parse_program(text)
    view = SemanticView.build(widget_context, program, widget_resolver, configuration)
    program = recase(program, view)
    view = SemanticView.build(widget_context, program, widget_resolver, configuration)
    assert print_program(prune_read_only(program, view)) == text


def test_normalize_is_deterministic(widget_context, widget_resolver) -> None:
    normalizer = DeclarationNormalizer(widget_context, widget_resolver, TesseraConfig())
    assert normalizer.normalize(_declaration()) == normalizer.normalize(_declaration())


def test_normalize_uses_configured_print_options(widget_context, widget_resolver) -> None:
    configuration = TesseraConfig(
        printer=PrintOptions(
            newline=NewlineOption.CRLF,
            indent_kind=IndentKindOption.TAB,
            insert_final_newline=True,
        )
    )
    text = DeclarationNormalizer(widget_context, widget_resolver, configuration).normalize(
        _declaration()
    )
    expected = WIDGET_DECLARATION.replace("  ", "\t").replace("\n", "\r\n") + "\r\n"
    assert text == expected


def test_normalize_keeps_retained_read_only_properties(widget_context, widget_resolver) -> None:
    configuration = TesseraConfig(retain=frozenset({"provisioningState"}))
    text = DeclarationNormalizer(widget_context, widget_resolver, configuration).normalize(
        _declaration()
    )
    assert "    provisioningState: 'Succeeded'\n" in text
    assert "id:" not in text


def test_failure_in_third_iteration(widget_context, widget_resolver) -> None:
    factory = _CountingFactory(fail_on_call=5)
    normalizer = DeclarationNormalizer(
        widget_context, widget_resolver, TesseraConfig(), view_factory=factory
    )
    with pytest.raises(NormalizationFailed) as excinfo:
        normalizer.normalize(_declaration())
    assert isinstance(excinfo.value, NormalizationError)
    assert excinfo.value.iteration == 2
    assert isinstance(excinfo.value.__cause__, SemanticViewError)
    assert factory.calls == 5


def test_cancelled_token_stops_normalization(widget_context, widget_resolver) -> None:
    token = CancellationToken()
    token.cancel()
    factory = _CountingFactory()
    normalizer = DeclarationNormalizer(
        widget_context, widget_resolver, TesseraConfig(), view_factory=factory
    )
    with cancellation_scope(token):
        with pytest.raises(OperationCancelled):
            normalizer.normalize(_declaration())
    assert factory.calls == 0


def test_expired_deadline_stops_normalization(widget_context, widget_resolver) -> None:
    normalizer = DeclarationNormalizer(widget_context, widget_resolver, TesseraConfig())
    with cancellation_scope(deadline=Deadline(0)):
        with pytest.raises(OperationCancelled):
            normalizer.normalize(_declaration())


def test_unknown_type_is_left_as_lowered(widget_context, widget_resolver) -> None:
    declaration = synthesize(
        parse_resource_id(WIDGET_ID),
        TypeDescriptor(WIDGET_TYPE, "1999-01-01"),
        {"Id": "x", "Properties": {"a": 1}},
    )
    text = DeclarationNormalizer(widget_context, widget_resolver, TesseraConfig()).normalize(
        declaration
    )
    assert text == (
        "resource mywidget 'Test.Provider/widgets@1999-01-01' = {\n"
        "  Id: 'x'\n"
        "  Properties: {\n"
        "    a: 1\n"
        "  }\n"
        "}"
    )


def test_colliding_spellings_keep_distinct_keys(widget_context, widget_resolver) -> None:
    declaration = _declaration({"Location": "a", "LOCATION": "b", "name": "w"})
    text = DeclarationNormalizer(widget_context, widget_resolver, TesseraConfig()).normalize(
        declaration
    )
    keys = [prop.key for prop in parse_program(text).declarations[0].body.properties]
    assert keys == ["location", "LOCATION", "name"]
    assert len(keys) == len(set(keys))
