# tests/conftest.py
import os
import sys

import pytest

# pytest-dotenv has already loaded .env at this point
pp = os.getenv("PYTHONPATH")
if pp:
    for p in pp.split(os.pathsep):
        if p:
            sys.path.insert(0, p)


@pytest.fixture
def no_api_key(monkeypatch):
    """Hide any description-service key a local .env may have provided."""
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("API_KEY", raising=False)


@pytest.fixture(autouse=True)
def _no_runtime_config_module(monkeypatch):
    monkeypatch.delenv("SENTINEL_CONFIG_MODULE", raising=False)
