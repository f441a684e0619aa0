import httpx
import pytest

from scheduling.features.organizations.services.org_domains import (
    DomainProvisioningError,
    create_domain,
    get_org_full_origin,
)


@pytest.fixture
def provider(monkeypatch):
    monkeypatch.setattr("scheduling.config.settings.WEBAPP_URL", "https://app.example.com")
    monkeypatch.setattr("scheduling.config.settings.ORGANIZATIONS_DOMAIN", None)
    monkeypatch.setattr("scheduling.config.settings.DOMAIN_PROVIDER_TOKEN", "token-123")
    monkeypatch.setattr("scheduling.config.settings.DOMAIN_PROVIDER_PROJECT_ID", "prj_1")
    monkeypatch.setattr("scheduling.config.settings.DOMAIN_PROVIDER_TEAM_ID", None)


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_full_origin(provider):
    assert get_org_full_origin("acme") == "https://acme.example.com"
    assert get_org_full_origin("acme", protocol=False) == "acme.example.com"
    assert get_org_full_origin("") == "https://example.com"


@pytest.mark.asyncio
async def test_create_domain_posts_subdomain(provider):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = request.content
        return httpx.Response(200, json={"name": "acme.example.com"})

    async with _client(handler) as client:
        assert await create_domain("acme", client=client) is True

    assert seen["url"] == "https://api.vercel.com/v10/projects/prj_1/domains"
    assert seen["auth"] == "Bearer token-123"
    assert b"acme.example.com" in seen["body"]


@pytest.mark.asyncio
async def test_existing_domain_counts_as_success(provider):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": {"code": "domain_already_in_use"}})

    async with _client(handler) as client:
        assert await create_domain("acme", client=client) is True


@pytest.mark.asyncio
async def test_provider_rejection_raises(provider):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403, json={"error": {"code": "forbidden"}})

    async with _client(handler) as client:
        with pytest.raises(DomainProvisioningError) as exc_info:
            await create_domain("acme", client=client)

    assert exc_info.value.status_code == 403
    assert exc_info.value.domain == "acme.example.com"


@pytest.mark.asyncio
async def test_unconfigured_provider_returns_false(provider, monkeypatch):
    monkeypatch.setattr("scheduling.config.settings.DOMAIN_PROVIDER_TOKEN", None)

    assert await create_domain("acme") is False
