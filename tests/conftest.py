import pytest

from scheduling.config import settings


@pytest.fixture(autouse=True)
def development_settings(monkeypatch):
    """Keep tests off real providers regardless of the local .env file."""
    monkeypatch.setattr(settings, "environment", "development")
    monkeypatch.setattr(settings, "RESEND_API_KEY", None)
    monkeypatch.setattr(settings, "WEBAPP_URL", "https://app.example.com")
    monkeypatch.setattr(settings, "ORGANIZATIONS_DOMAIN", None)
    monkeypatch.setattr(settings, "DOMAIN_PROVIDER_TOKEN", None)
    monkeypatch.setattr(settings, "DOMAIN_PROVIDER_PROJECT_ID", None)
