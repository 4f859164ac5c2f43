"""OpenID Connect discovery primitive.

Fetches `/.well-known/openid-configuration` for providers that do not ship
a static discovery document. The request engine never calls this itself.
"""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from authsession.models.discovery import DiscoveryDocument
from authsession.models.errors import DiscoveryError

logger = logging.getLogger(__name__)

OPENID_CONFIGURATION_PATH = "/.well-known/openid-configuration"


def build_discovery_url(issuer: str) -> str:
    """Build the OpenID configuration URL for an issuer.

    Path components of the issuer are preserved (OpenID Connect Discovery
    section 4).
    """
    return issuer.rstrip("/") + OPENID_CONFIGURATION_PATH


async def fetch_discovery_document(
    issuer: str,
    http_client: httpx.AsyncClient | None = None,
    timeout: float = 30.0,
) -> DiscoveryDocument:
    """Fetch and parse an issuer's discovery document.

    Args:
        issuer: Issuer URL, e.g. ``https://accounts.google.com``
        http_client: Optional client to reuse. Closed only if created here.
        timeout: HTTP request timeout in seconds

    Raises:
        DiscoveryError: If the document cannot be fetched or is invalid
    """
    url = build_discovery_url(issuer)
    owns_client = http_client is None
    client = http_client or httpx.AsyncClient(timeout=timeout)

    try:
        logger.debug(f"Fetching discovery document from {url}")
        response = await client.get(url, headers={"Accept": "application/json"})

        if response.status_code != 200:
            raise DiscoveryError(
                f"Discovery request to {url} failed with status "
                f"{response.status_code}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise DiscoveryError(f"Invalid JSON in discovery document: {e}") from e

        if not isinstance(data, dict):
            raise DiscoveryError("Discovery document must be a JSON object")

        try:
            document = DiscoveryDocument.from_openid_configuration(data)
        except ValidationError as e:
            raise DiscoveryError(f"Invalid discovery document: {e}") from e

        logger.info(f"Loaded discovery document for {issuer}")
        return document

    except httpx.RequestError as e:
        raise DiscoveryError(f"Network error fetching {url}: {e}") from e
    finally:
        if owns_client:
            await client.aclose()
