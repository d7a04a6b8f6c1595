"""Bearer token acquisition for the source and destination systems."""

import logging
from typing import Optional

import requests

from ..exceptions import AuthError
from ..models.migration import SystemConfig

logger = logging.getLogger(__name__)


def token_url(config: SystemConfig) -> str:
    """Get the OpenID Connect token endpoint for a system."""
    return f"{config.url}/auth/realms/{config.realm}/protocol/openid-connect/token"


def fetch_token(
    config: SystemConfig,
    verify_ssl: bool = True,
    session: Optional[requests.Session] = None
) -> Optional[str]:
    """
    Obtain a bearer token with the resource-owner password grant.

    Args:
        config: System connection settings
        verify_ssl: Verify TLS certificates
        session: Custom requests session

    Returns:
        Access token, the configured token, or None when the system has no
        credentials configured
    """
    if config.token:
        return config.token
    if not config.requires_auth:
        logger.debug(f"No credentials configured for {config.url}, running unauthenticated")
        return None

    url = token_url(config)
    data = {
        "grant_type": "password",
        "client_id": config.client_id,
        "username": config.username,
        "password": config.password,
    }
    http = session or requests

    logger.debug(f"Requesting token from {url}")
    try:
        response = http.post(url, data=data, verify=verify_ssl)
    except requests.exceptions.RequestException as e:
        raise AuthError(f"Token request to {url} failed: {e}")

    if not response.ok:
        raise AuthError(f"Token request to {url} failed with status {response.status_code}: {response.text}")

    try:
        return response.json()["access_token"]
    except (ValueError, KeyError):
        raise AuthError(f"Token response from {url} has no access_token")
