"""Retrieval of live resource state."""

from __future__ import annotations

import json
import logging
import subprocess
import urllib.parse
import urllib.request
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Protocol

from tessera.config import DEFAULT_ARM_ENDPOINT, DEFAULT_FETCH_TIMEOUT_SECONDS
from tessera.exceptions import FetchError
from tessera.json_types import JSONValue, JsonNumber
from tessera.resource_id import ResourceIdentifier

logger = logging.getLogger(__name__)

AZ_TOKEN_COMMAND = ("az", "account", "get-access-token", "--output", "json")


class ResourceFetcher(Protocol):
    def fetch(self, resource_id: ResourceIdentifier, api_version: str) -> JSONValue | None:
        """Return the resource's JSON body, or None when there is none."""


class TokenProvider(Protocol):
    def get_token(self, resource: str) -> str:
        """Return a bearer token for ``resource``."""


def decode_payload(raw: bytes | str) -> JSONValue | None:
    text = raw.decode("utf-8-sig") if isinstance(raw, bytes) else raw
    if not text.strip():
        return None
    try:
        return json.loads(text, parse_float=JsonNumber)
    except json.JSONDecodeError as exc:
        raise FetchError(f"Resource body is not JSON: {exc}") from exc


@dataclass
class AzureCliTokenProvider:
    runner: Callable[..., subprocess.CompletedProcess] = subprocess.run

    def get_token(self, resource: str) -> str:
        result = self.runner(
            [*AZ_TOKEN_COMMAND, "--resource", resource],
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            raise FetchError(
                f"az account get-access-token failed ({result.returncode}): "
                f"{(result.stderr or '').strip()}"
            )
        try:
            payload = json.loads(result.stdout)
        except json.JSONDecodeError as exc:
            raise FetchError(f"Unreadable token payload from az: {exc}") from exc
        token = payload.get("accessToken") if isinstance(payload, dict) else None
        if not isinstance(token, str) or not token:
            raise FetchError("az returned no access token")
        return token


@dataclass
class ArmResourceFetcher:
    token_provider: TokenProvider = field(default_factory=AzureCliTokenProvider)
    endpoint: str = DEFAULT_ARM_ENDPOINT
    timeout_seconds: float = DEFAULT_FETCH_TIMEOUT_SECONDS
    opener: Callable[..., object] = urllib.request.urlopen

    def build_request(
        self, resource_id: ResourceIdentifier, api_version: str
    ) -> urllib.request.Request:
        query = urllib.parse.urlencode({"api-version": api_version})
        path = urllib.parse.quote(resource_id.fully_qualified_id, safe="/")
        token = self.token_provider.get_token(self.endpoint.rstrip("/") + "/")
        return urllib.request.Request(
            f"{self.endpoint.rstrip('/')}{path}?{query}",
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/json",
            },
            method="GET",
        )

    def fetch(self, resource_id: ResourceIdentifier, api_version: str) -> JSONValue | None:
        request = self.build_request(resource_id, api_version)
        logger.debug("GET %s", request.full_url)
        with self.opener(request, timeout=self.timeout_seconds) as response:
            body = response.read()
        return decode_payload(body)


@dataclass(frozen=True)
class FileResourceFetcher:
    """Serves a previously captured resource body from disk."""

    path: Path

    def fetch(self, resource_id: ResourceIdentifier, api_version: str) -> JSONValue | None:
        return decode_payload(self.path.read_bytes())
