"""
Backend clients for nomadwatch.

This module provides:
- The client contract queries rely on (NomadAPI / NodesAPI protocols)
- An httpx based client for the Nomad HTTP API
- ClientSet, the container handed to every fetch
"""

import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Tuple
from urllib.parse import quote

import httpx

from ..config import NomadConfig
from ..exceptions import ClientError, ConfigurationError
from ..logger import get_logger
from ..options import QueryOptions

logger = get_logger(__name__)

INDEX_HEADER = "X-Nomad-Index"
LAST_CONTACT_HEADER = "X-Nomad-LastContact"
KNOWN_LEADER_HEADER = "X-Nomad-KnownLeader"
TOKEN_HEADER = "X-Nomad-Token"


@dataclass(frozen=True)
class QueryMeta:
    """Metadata the backend returns alongside every read."""

    last_index: int = 0
    last_contact: float = 0.0  # seconds
    known_leader: bool = True


class NodesAPI(Protocol):
    """Node endpoints a query needs from the backend."""

    def info(
        self, node_id: str, options: QueryOptions
    ) -> Tuple[Optional[Dict[str, Any]], QueryMeta]:
        """Return the full node entry, or None when the backend has no such node."""

    def list(self, options: QueryOptions) -> Tuple[List[Dict[str, Any]], QueryMeta]:
        """Return node list stubs matching the options."""


class NomadAPI(Protocol):
    """Entry point of a Nomad client."""

    def nodes(self) -> NodesAPI:
        """Return the node endpoints."""


def _parse_query_meta(headers: httpx.Headers) -> QueryMeta:
    """Read index and last contact headers; missing or bad values read as zero."""
    try:
        last_index = int(headers.get(INDEX_HEADER, "0"))
    except ValueError:
        last_index = 0
    try:
        last_contact = int(headers.get(LAST_CONTACT_HEADER, "0")) / 1000.0
    except ValueError:
        last_contact = 0.0
    known_leader = headers.get(KNOWN_LEADER_HEADER, "true").lower() == "true"
    return QueryMeta(
        last_index=last_index, last_contact=last_contact, known_leader=known_leader
    )


class NomadHTTPClient:
    """Synchronous client for the Nomad HTTP API."""

    def __init__(
        self,
        address: str = "http://127.0.0.1:4646",
        token: Optional[str] = None,
        timeout: float = 30.0,
        verify: bool = True,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.address = address.rstrip("/")
        self.timeout = timeout

        headers = {"Accept": "application/json"}
        if token:
            headers[TOKEN_HEADER] = token

        # httpx.Client is safe to share between threads.
        self.client = httpx.Client(
            base_url=self.address,
            timeout=httpx.Timeout(timeout),
            verify=verify,
            headers=headers,
            transport=transport,
        )

    @classmethod
    def from_config(
        cls, config: NomadConfig, transport: Optional[httpx.BaseTransport] = None
    ) -> "NomadHTTPClient":
        """Create a client from NomadConfig settings."""
        return cls(
            address=config.address,
            token=config.token,
            timeout=config.timeout_seconds,
            verify=config.verify_tls,
            transport=transport,
        )

    def get(self, path: str, options: QueryOptions) -> Tuple[Any, QueryMeta]:
        """GET path and return the decoded body with its query metadata."""
        start_time = time.time()
        try:
            response = self.client.get(path, params=options.to_params())
        except httpx.HTTPError as e:
            logger.error("Nomad request failed", path=path, error=str(e))
            raise ClientError(f"GET {path}: {e}") from e

        duration = time.time() - start_time
        logger.debug(
            "Nomad request completed",
            path=path,
            status_code=response.status_code,
            duration_ms=round(duration * 1000, 2),
        )

        if response.status_code != 200:
            raise ClientError(
                f"Unexpected response code: {response.status_code} "
                f"({response.text.strip()})",
                status_code=response.status_code,
                details={"path": path},
            )

        try:
            body = response.json()
        except ValueError as e:
            raise ClientError(
                f"GET {path}: invalid JSON response: {e}",
                status_code=response.status_code,
            ) from e

        return body, _parse_query_meta(response.headers)

    def nodes(self) -> "Nodes":
        """Return the node endpoints."""
        return Nodes(self)

    def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        self.client.close()

    def __enter__(self) -> "NomadHTTPClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class Nodes:
    """Node endpoints of the Nomad HTTP API."""

    def __init__(self, client: NomadHTTPClient):
        self.client = client

    def info(
        self, node_id: str, options: QueryOptions
    ) -> Tuple[Optional[Dict[str, Any]], QueryMeta]:
        body, meta = self.client.get(f"/v1/node/{quote(node_id, safe='')}", options)
        if body is not None and not isinstance(body, dict):
            raise ClientError(f"node info: expected an object, got {type(body).__name__}")
        return body, meta

    def list(self, options: QueryOptions) -> Tuple[List[Dict[str, Any]], QueryMeta]:
        body, meta = self.client.get("/v1/nodes", options)
        if body is None:
            return [], meta
        if not isinstance(body, list):
            raise ClientError(f"node list: expected an array, got {type(body).__name__}")
        return body, meta


class ClientSet:
    """Collection of backend clients handed to every fetch."""

    def __init__(self, nomad: Optional[NomadAPI] = None):
        self._nomad = nomad

    @classmethod
    def from_config(
        cls, config: NomadConfig, transport: Optional[httpx.BaseTransport] = None
    ) -> "ClientSet":
        """Build a ClientSet with an HTTP client for the configured Nomad address."""
        return cls(nomad=NomadHTTPClient.from_config(config, transport=transport))

    def nomad(self) -> NomadAPI:
        """Return the Nomad client."""
        if self._nomad is None:
            raise ConfigurationError("no Nomad client configured")
        return self._nomad

    def close(self) -> None:
        """Close clients that own network resources."""
        close = getattr(self._nomad, "close", None)
        if close is not None:
            close()

    def __enter__(self) -> "ClientSet":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


__all__ = [
    "ClientSet",
    "NodesAPI",
    "NomadAPI",
    "NomadHTTPClient",
    "Nodes",
    "QueryMeta",
]
