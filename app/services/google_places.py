"""Clients for the external place-information provider (Google Places API v1)."""
import abc
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from app.config import Settings, settings
from app.errors import ProviderUnauthenticatedError, ProviderUnavailableError
from app.models.places import ProviderDetails

logger = logging.getLogger(__name__)


class PlacesProvider(abc.ABC):
    """Remote place lookups used by the enrichment service."""

    @abc.abstractmethod
    async def fetch_by_id(self, provider_id: str) -> ProviderDetails:
        """Fetch details for a provider place id."""

    @abc.abstractmethod
    async def search_by_name(self, text: str) -> List[ProviderDetails]:
        """Free-text search, results in provider-ranked order (possibly empty)."""

    async def aclose(self) -> None:
        return None


class GooglePlacesClient(PlacesProvider):
    """HTTP client wrapper for the Google Places API."""

    def __init__(
        self,
        config: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        config = config or settings
        self.api_key = config.google_places_api_key
        self.base_url = config.google_places_base_url.rstrip("/")
        self.search_url = config.google_places_search_url
        self.search_suffix = config.google_places_search_suffix
        self.http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(
                config.provider_read_timeout,
                connect=config.provider_connect_timeout,
            ),
            transport=transport,
        )

    def _headers(self) -> Dict[str, str]:
        if not self.api_key:
            raise ProviderUnauthenticatedError(
                "Google Places API key is not configured (GOOGLE_PLACES_API_KEY)"
            )
        return {
            "Accept": "application/json",
            "X-Goog-Api-Key": self.api_key,
            "X-Goog-FieldMask": "*",
        }

    async def fetch_by_id(self, provider_id: str) -> ProviderDetails:
        """Get place details by Google place id."""
        headers = self._headers()
        logger.info(f"Fetching Google place details: {provider_id}")
        url = f"{self.base_url}/{quote(provider_id, safe='')}"
        data = await self._request("GET", url, headers=headers)
        return _parse_place(data)

    async def search_by_name(self, text: str) -> List[ProviderDetails]:
        """Search Google places by free text."""
        headers = self._headers()
        query = f"{text} {self.search_suffix}" if self.search_suffix else text
        logger.info(f"Searching Google places by text: {query!r}")
        data = await self._request(
            "POST",
            self.search_url,
            headers=headers,
            json={"textQuery": query},
        )
        return [_parse_place(place) for place in data.get("places") or []]

    async def _request(self, method: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            response = await self.http_client.request(method, url, **kwargs)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            logger.error(f"Google Places API error {status_code}: {exc.response.text[:200]}")
            if status_code in (401, 403):
                raise ProviderUnauthenticatedError(
                    f"Google Places API rejected the credential ({status_code})"
                ) from exc
            raise ProviderUnavailableError(
                f"Google Places API returned {status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            logger.error(f"Failed to reach Google Places API: {exc}")
            raise ProviderUnavailableError(f"Failed to reach Google Places API: {exc}") from exc
        except ValueError as exc:
            raise ProviderUnavailableError("Google Places API returned invalid JSON") from exc

        if not isinstance(data, dict):
            raise ProviderUnavailableError(
                f"Google Places API returned {type(data).__name__}, expected an object"
            )
        return data

    async def aclose(self) -> None:
        await self.http_client.aclose()


def _parse_place(payload: Dict[str, Any]) -> ProviderDetails:
    try:
        return ProviderDetails.from_api(payload)
    except (ValueError, AttributeError) as exc:
        raise ProviderUnavailableError(
            f"Google Places API returned an unexpected place payload: {exc}"
        ) from exc
