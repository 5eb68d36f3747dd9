import pytest

from retail_pricing.config.settings import RULE_SET_ENV, reset_settings


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Each test starts from the built-in rule set."""
    monkeypatch.delenv(RULE_SET_ENV, raising=False)
    reset_settings()
    yield
    reset_settings()
