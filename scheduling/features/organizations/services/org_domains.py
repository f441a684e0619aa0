"""
Organization subdomains: public URLs and provisioning with the hosting provider.
"""

import httpx

from scheduling.config import settings
from scheduling.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

REQUEST_TIMEOUT = 15  # seconds
ALREADY_EXISTS_CODES = {"domain_already_in_use", "domain_already_exists", "domain_taken"}


class DomainProvisioningError(Exception):
    def __init__(self, message: str, domain: str, status_code: int | None = None):
        super().__init__(message)
        self.domain = domain
        self.status_code = status_code


def get_org_full_origin(slug: str | None, protocol: bool = True) -> str:
    """
    Public origin of an organization, e.g. "https://acme.example.com".
    An empty slug gives the bare organizations domain.
    """
    prefix = f"{settings.webapp_protocol()}://" if protocol else ""
    subdomain = f"{slug}." if slug else ""
    return f"{prefix}{subdomain}{settings.subdomain_suffix()}"


async def create_domain(slug: str, *, client: httpx.AsyncClient | None = None) -> bool:
    """
    Attach the organization's subdomain to the hosting project.

    Returns:
        True when the domain is attached (including when it already was),
        False when no provider is configured

    Raises:
        DomainProvisioningError: provider rejected the domain
    """
    if not settings.domain_provider_configured():
        logger.warning("Domain provider not configured, skipping subdomain setup", slug=slug)
        return False

    domain = get_org_full_origin(slug, protocol=False)
    url = (
        f"{settings.DOMAIN_PROVIDER_API_URL.rstrip('/')}"
        f"/v10/projects/{settings.DOMAIN_PROVIDER_PROJECT_ID}/domains"
    )
    params = {"teamId": settings.DOMAIN_PROVIDER_TEAM_ID} if settings.DOMAIN_PROVIDER_TEAM_ID else {}
    headers = {"Authorization": f"Bearer {settings.DOMAIN_PROVIDER_TOKEN}"}

    owns_client = client is None
    client = client or httpx.AsyncClient(timeout=REQUEST_TIMEOUT)
    try:
        response = await client.post(url, json={"name": domain}, params=params, headers=headers)
    finally:
        if owns_client:
            await client.aclose()

    if response.is_success:
        logger.info("Organization domain created", domain=domain)
        return True

    try:
        error_code = response.json().get("error", {}).get("code")
    except ValueError:
        error_code = None

    if response.status_code == 409 or error_code in ALREADY_EXISTS_CODES:
        logger.info("Organization domain already exists", domain=domain, error_code=error_code)
        return True

    logger.error(
        "Organization domain creation failed",
        domain=domain,
        status_code=response.status_code,
        error_code=error_code,
    )
    raise DomainProvisioningError(
        f"Failed to create domain {domain}: {error_code or response.status_code}",
        domain=domain,
        status_code=response.status_code,
    )
