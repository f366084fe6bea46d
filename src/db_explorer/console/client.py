"""HTTP client the Query Console uses to reach the Query Gateway."""
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import urlsplit

import requests

from ..errors import ConfigurationError, DatabaseError, TransportError
from ..logging import logger


@dataclass(frozen=True)
class QueryOutcome:
    """Result of one round trip: exactly one of `results` / `error` is set."""
    results: Optional[list[dict[str, Any]]] = None
    error: Optional[str] = None

    def __post_init__(self) -> None:
        if (self.results is None) == (self.error is None):
            raise ValueError("QueryOutcome needs exactly one of results or error")

    @property
    def ok(self) -> bool:
        return self.error is None


def normalize_base_url(base_url: str) -> str:
    """Validate and normalise the Gateway base URL.

    Raises:
        ConfigurationError: If the URL is not an absolute http(s) URL, or
                            carries a second scheme in its host part.
    """
    candidate = base_url.strip().rstrip("/")
    parts = urlsplit(candidate)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ConfigurationError(
            "Gateway URL must be an absolute http:// or https:// URL",
            details={"base_url": base_url}
        )
    if "//" in parts.netloc + parts.path or parts.netloc.endswith(":"):
        raise ConfigurationError(
            "Gateway URL contains more than one scheme",
            details={"base_url": base_url}
        )
    return candidate


class GatewayClient:
    """Thin wrapper around the Gateway's two endpoints.

    The Gateway reports errors through an `error` key in the JSON body, so
    that key wins over the HTTP status. Anything that is neither a result
    nor an error payload is a TransportError.
    """

    def __init__(
        self,
        base_url: str,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None
    ) -> None:
        self._base_url = normalize_base_url(base_url)
        self._timeout = timeout
        self._session = session or requests.Session()

    @property
    def base_url(self) -> str:
        return self._base_url

    def list_tables(self) -> list[str]:
        """Fetch table names.

        Raises:
            DatabaseError: The Gateway answered with an error payload.
            TransportError: The Gateway could not be reached or replied with
                something other than a table list.
        """
        payload = self._request("GET", "/api/tables")
        if "error" in payload:
            raise DatabaseError(str(payload["error"]))
        tables = payload.get("tables")
        if not isinstance(tables, list):
            raise TransportError("Gateway response is missing 'tables'")
        return [str(name) for name in tables]

    def run_query(self, query: str) -> QueryOutcome:
        """Send SQL text as-is and return rows or the database's message.

        Raises:
            TransportError: The request did not produce a usable reply.
        """
        payload = self._request("POST", "/api/query", json={"query": query})
        if "error" in payload:
            return QueryOutcome(error=str(payload["error"]))
        results = payload.get("results")
        if results is None:
            results = []
        if not isinstance(results, list):
            raise TransportError("Gateway response 'results' is not a list")
        return QueryOutcome(results=results)

    def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        url = f"{self._base_url}{path}"
        try:
            response = self._session.request(method, url, timeout=self._timeout, **kwargs)
        except requests.exceptions.Timeout as e:
            raise TransportError(f"Gateway request timed out: {e}", details={"url": url})
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Gateway request failed: {e}", details={"url": url})

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if isinstance(payload, dict) and ("error" in payload or response.status_code < 400):
            return payload

        logger.warning("Unusable Gateway reply from %s: HTTP %s", url, response.status_code)
        raise TransportError(
            f"Gateway returned HTTP {response.status_code}",
            details={"url": url, "status_code": response.status_code}
        )
