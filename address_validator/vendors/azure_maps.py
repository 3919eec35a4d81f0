"""Client utilities for the Azure Maps Search Address API."""

import logging
from typing import Any, Dict, Optional

import requests

from address_validator.core.config import DEFAULT_ENDPOINT
from address_validator.core.models import SearchResponse
from address_validator.etl.transform import parse_search_response

logger = logging.getLogger(__name__)
_SESSION = requests.Session()
_API_VERSION = "1.0"


class AzureMapsError(RuntimeError):
    """Raised when Azure Maps cannot be reached or returns an unusable response."""


class AzureMapsClient:
    """Geocoding provider backed by Azure Maps fuzzy address search.

    The client never retries; a failed call surfaces as `AzureMapsError` and
    the validation service turns it into an invalid result.
    """

    def __init__(
        self,
        api_key: str,
        endpoint: str = DEFAULT_ENDPOINT,
        limit: int = 5,
        timeout: float = 10,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.endpoint = endpoint if endpoint.endswith("/") else endpoint + "/"
        self.limit = limit
        self.timeout = timeout
        self._session = session

    @property
    def session(self) -> requests.Session:
        return self._session if self._session is not None else _SESSION

    def search_address(self, query: str) -> SearchResponse:
        if not query or not query.strip():
            raise ValueError("Address cannot be empty")

        params: Dict[str, Any] = {
            "api-version": _API_VERSION,
            "subscription-key": self.api_key,
            "query": query,
            "typeahead": "false",
            "limit": self.limit,
        }
        logger.info("Calling Azure Maps address search for query=%s", query)
        try:
            response = self.session.get(
                f"{self.endpoint}search/address/json", params=params, timeout=self.timeout
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.error("Azure Maps request failed for query=%s: %s", query, exc)
            raise AzureMapsError(f"Error connecting to Azure Maps API: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            logger.error("Azure Maps returned an undecodable payload: %s", exc)
            raise AzureMapsError(f"Error parsing Azure Maps response: {exc}") from exc
        if not isinstance(payload, dict):
            raise AzureMapsError("Error parsing Azure Maps response: expected a JSON object")

        search_response = parse_search_response(payload)
        logger.info("Azure Maps returned %d candidates for query=%s", len(search_response.results), query)
        return search_response
