"""REST client shared by the source and destination systems."""

import json
import logging
from typing import Any, Dict, List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..exceptions import TransportError

logger = logging.getLogger(__name__)

ENVELOPE_FIELD = "_embedded"


def resource_name(path: str) -> str:
    """Get the resource name of a collection path (last segment, no query)."""
    return path.split("?", 1)[0].rstrip("/").rsplit("/", 1)[-1]


def unwrap_collection(payload: Any, resource: str) -> Any:
    """
    Strip the collection envelope, if any.

    Some endpoints answer with a bare array, others with
    {"_embedded": {"<resource>": [...]}}.

    Args:
        payload: Decoded response body
        resource: Resource name expected inside the envelope

    Returns:
        The bare collection, or the payload unchanged
    """
    if isinstance(payload, dict) and ENVELOPE_FIELD in payload:
        embedded = payload[ENVELOPE_FIELD] or {}
        logger.debug(f"Unwrapping '{resource}' from response envelope")
        return embedded.get(resource, [])
    return payload


class ApiClient:
    """
    Blocking JSON client for one REST system.

    One request is outstanding at a time. Any non-2xx answer raises
    TransportError unless the caller asks to ignore errors.
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        verify_ssl: bool = True,
        retry_config: Optional[Dict[str, Any]] = None,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the client.

        Args:
            base_url: Base URL of the system
            token: Bearer token, None for unauthenticated systems
            verify_ssl: Verify TLS certificates
            retry_config: max_retries / backoff_factor for the HTTP adapter
            session: Custom requests session
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.verify_ssl = verify_ssl
        self.retry_config = retry_config or {}
        self._session = session or self._create_session()

    def _create_session(self) -> requests.Session:
        """Create a requests session with authentication and retry logic."""
        session = requests.Session()

        retries = Retry(
            total=self.retry_config.get("max_retries", 0),
            backoff_factor=self.retry_config.get("backoff_factor", 0.0),
            status_forcelist=[502, 503, 504],
            allowed_methods=["GET"],
        )
        adapter = HTTPAdapter(max_retries=retries)
        session.mount("https://", adapter)
        session.mount("http://", adapter)

        if self.token:
            session.headers["Authorization"] = f"Bearer {self.token}"
        session.headers["Content-Type"] = "application/json"

        return session

    def url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _send(self, method: str, path: str, data: Optional[Any] = None) -> requests.Response:
        """Send one request, raising TransportError on failure or non-2xx status."""
        url = self.url(path)
        logger.debug(f"{method} {url}")
        if data is not None:
            logger.debug(f"Request body: {json.dumps(data, default=str)}")

        try:
            response = self._session.request(
                method,
                url,
                data=json.dumps(data) if data is not None else None,
                verify=self.verify_ssl,
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(f"{method} {url} failed: {e}", method=method, url=url)

        if not response.ok:
            raise TransportError(
                f"API request failed with status {response.status_code} for {method} {url}: {response.text}",
                method=method,
                url=url,
                status_code=response.status_code,
            )
        return response

    def request(self, method: str, path: str, data: Optional[Any] = None) -> Any:
        """
        Send one request and decode the JSON answer.

        Args:
            method: HTTP method
            path: Path relative to the base URL
            data: JSON body

        Returns:
            Decoded body, None for an empty body
        """
        response = self._send(method, path, data)
        if not response.text:
            return None

        logger.debug(f"Response: {response.text}")
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(
                f"Invalid JSON in response to {method} {self.url(path)}: {e}",
                method=method,
                url=self.url(path),
                status_code=response.status_code,
            )

    def get(self, path: str) -> Any:
        """GET a resource, unwrapping a collection envelope when present."""
        return unwrap_collection(self.request("GET", path), resource_name(path))

    def list_collection(self, path: str) -> List[Dict[str, Any]]:
        """GET a collection; an empty body counts as an empty collection."""
        return self.get(path) or []

    def post(self, path: str, data: Any) -> Any:
        """POST a JSON body and return the decoded answer."""
        return unwrap_collection(self.request("POST", path, data=data), resource_name(path))

    def delete(self, path: str, ignore_errors: bool = False) -> bool:
        """
        DELETE a resource.

        Args:
            path: Resource path
            ignore_errors: Log a failure instead of raising

        Returns:
            True if the resource was deleted
        """
        try:
            self._send("DELETE", path)
        except TransportError as e:
            if not ignore_errors:
                raise
            logger.warning(f"{e}, ignoring")
            return False
        return True
