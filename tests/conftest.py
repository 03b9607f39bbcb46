import os

import pytest

# ==========================================
# ENVIRONMENT SETUP
# ==========================================

# Settings read from the environment; cleared so a developer's .env or shell
# does not leak into tests
MANAGED_ENV_PREFIXES = ("CHROMA_", "OPENAI_", "MYCHROMA_", "listview_")


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Remove mychroma settings from the environment for each test."""
    for name in list(os.environ):
        if name.startswith(MANAGED_ENV_PREFIXES):
            monkeypatch.delenv(name, raising=False)
    yield monkeypatch
