from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
for entry in (ROOT, ROOT / "src"):
    if str(entry) not in sys.path:
        sys.path.insert(0, str(entry))


import pytest

from tessera.cancellation import cancellation_scope
from tests import schema_helpers


@pytest.fixture(autouse=True)
def _cancellation_scope_fixture():
    with cancellation_scope() as scope:
        yield scope


@pytest.fixture
def widget_resolver():
    return schema_helpers.widget_resolver()


@pytest.fixture
def widget_provider():
    return schema_helpers.widget_provider()


@pytest.fixture
def widget_context():
    return schema_helpers.widget_context()
