"""
Global pytest configuration and fixtures.

Keeps every test hermetic: no TANKSEARCH_* variables from the host and no
.env file from the working directory.
"""

import os

import pytest


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("TANKSEARCH_"):
            monkeypatch.delenv(key)
