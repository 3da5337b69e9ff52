from __future__ import annotations

import io
import json
import subprocess
from decimal import Decimal

import pytest

from tessera.exceptions import FetchError
from tessera.fetch import (
    AZ_TOKEN_COMMAND,
    ArmResourceFetcher,
    AzureCliTokenProvider,
    FileResourceFetcher,
    decode_payload,
)
from tessera.lowering import lower
from tessera.resource_id import parse_resource_id
from tessera.syntax.nodes import ObjectExpr, PropertyExpr, StringLiteral
from tests.schema_helpers import WIDGET_ID, WIDGET_PAYLOAD


class _StaticToken:
    def __init__(self) -> None:
        self.resources: list[str] = []

    def get_token(self, resource: str) -> str:
        self.resources.append(resource)
        return "secret"


class _Opener:
    def __init__(self, body: bytes) -> None:
        self.body = body
        self.requests = []

    def __call__(self, request, timeout):
        self.requests.append((request, timeout))
        return io.BytesIO(self.body)


def test_decode_payload_keeps_order_and_exact_fractions() -> None:
    decoded = decode_payload(b'\xef\xbb\xbf{"b": 1.10, "a": [2, null]}')
    assert list(decoded) == ["b", "a"]
    assert decoded["b"] == Decimal("1.10")
    assert str(decoded["b"]) == "1.10"


@pytest.mark.parametrize("raw", [b"", "   ", b"\n"])
def test_decode_payload_empty_body_is_none(raw) -> None:
    assert decode_payload(raw) is None


def test_decode_payload_rejects_non_json() -> None:
    with pytest.raises(FetchError):
        decode_payload("<html>")


def test_arm_fetcher_builds_authorized_get() -> None:
    tokens = _StaticToken()
    opener = _Opener(json.dumps(WIDGET_PAYLOAD).encode("utf-8"))
    fetcher = ArmResourceFetcher(
        token_provider=tokens,
        endpoint="https://arm.example/",
        timeout_seconds=5.0,
        opener=opener,
    )
    payload = fetcher.fetch(parse_resource_id(WIDGET_ID), "2023-05-01")

    assert payload == WIDGET_PAYLOAD
    (request, timeout), = opener.requests
    assert timeout == 5.0
    assert request.get_method() == "GET"
    assert request.full_url == f"https://arm.example{WIDGET_ID}?api-version=2023-05-01"
    assert request.get_header("Authorization") == "Bearer secret"
    assert tokens.resources == ["https://arm.example/"]


def test_arm_fetcher_empty_body_is_none() -> None:
    fetcher = ArmResourceFetcher(token_provider=_StaticToken(), opener=_Opener(b""))
    assert fetcher.fetch(parse_resource_id(WIDGET_ID), "2023-05-01") is None


def test_file_fetcher_reads_captured_payload(tmp_path) -> None:
    path = tmp_path / "widget.json"
    path.write_text(json.dumps(WIDGET_PAYLOAD), encoding="utf-8")
    fetcher = FileResourceFetcher(path)
    assert fetcher.fetch(parse_resource_id(WIDGET_ID), "ignored") == WIDGET_PAYLOAD


def _runner(returncode: int, stdout: str = "", stderr: str = ""):
    calls = []

    def run(args, **kwargs):
        calls.append((args, kwargs))
        return subprocess.CompletedProcess(args, returncode, stdout=stdout, stderr=stderr)

    return run, calls


def test_az_token_provider_reads_access_token() -> None:
    run, calls = _runner(0, stdout=json.dumps({"accessToken": "abc"}))
    provider = AzureCliTokenProvider(runner=run)
    assert provider.get_token("https://management.azure.com/") == "abc"
    (args, kwargs), = calls
    assert args == [*AZ_TOKEN_COMMAND, "--resource", "https://management.azure.com/"]
    assert kwargs["capture_output"] is True


@pytest.mark.parametrize(
    ("returncode", "stdout", "stderr"),
    [
        (1, "", "Please run 'az login'"),
        (0, "not json", ""),
        (0, json.dumps({"expiresOn": "soon"}), ""),
        (0, json.dumps(["abc"]), ""),
    ],
)
def test_az_token_provider_failures(returncode, stdout, stderr) -> None:
    run, _ = _runner(returncode, stdout=stdout, stderr=stderr)
    with pytest.raises(FetchError):
        AzureCliTokenProvider(runner=run).get_token("https://management.azure.com/")


def test_decode_payload_keeps_number_token_text() -> None:
    decoded = decode_payload('{"a": 1e5, "b": -2.50E-3, "c": 100000000000}')
    assert decoded["a"] == Decimal("100000")
    assert str(decoded["a"]) == "1e5"
    assert lower(decoded) == ObjectExpr(
        (
            PropertyExpr("a", StringLiteral("1e5")),
            PropertyExpr("b", StringLiteral("-2.50E-3")),
            PropertyExpr("c", StringLiteral("100000000000")),
        )
    )
