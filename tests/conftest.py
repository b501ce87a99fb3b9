"""
Pytest configuration file.

Every test starts from default settings, whatever TABSTORE_* variables the
surrounding environment happens to define.
"""
import pytest

from tabstore.settings import reset_settings


@pytest.fixture(autouse=True)
def default_settings(monkeypatch):
    for name in ("TABSTORE_QUANT_FORMAT", "TABSTORE_DELIMITER", "TABSTORE_ENCODING", "TABSTORE_SKIP_HEADER"):
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()
