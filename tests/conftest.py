from __future__ import annotations

"""Pytest fixtures for the ingestion API.

The application is built once with display flags on, so route tests can
inspect context, data and flows in the responses. Nothing here touches
the network: normalization is pure and delivery is out of process.
"""

import os
import sys
from pathlib import Path

import pytest
from fastapi import FastAPI
from starlette.testclient import TestClient

# ---------------------------------------------------------------------------
# Runtime env for the application
# ---------------------------------------------------------------------------

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("FRAGMENT_PREFIX", "")
os.environ.setdefault("FRAGMENT_SHOW_META", "true")
os.environ.setdefault("FRAGMENT_SHOW_DATA", "true")

# Ensure project root on PYTHONPATH so `import fragment` works when pytest is run
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Boot the app once
from fragment.main import create_app, limiter  # noqa: E402, WPS433

app: FastAPI = create_app()
client = TestClient(app)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture()
def api_client() -> TestClient:  # noqa: D401 – simple alias
    return client
