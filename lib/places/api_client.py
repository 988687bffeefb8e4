"""Google Places API (New) client - Text Search.

One synchronous POST per query, no pagination. The field mask keeps the
payload down to the fields we map into BusinessRecord.

Usage:
    async with httpx.AsyncClient() as http:
        client = PlacesClient(api_key, client=http)
        businesses = await client.search("coffee shops in Seattle", max_results=20)
"""

from typing import Any, Optional

import httpx
from loguru import logger
from pydantic import BaseModel

PLACES_SEARCH_URL = "https://places.googleapis.com/v1/places:searchText"

FIELD_MASK = ",".join([
    "places.displayName",
    "places.formattedAddress",
    "places.rating",
    "places.websiteUri",
    "places.internationalPhoneNumber",
])

API_TIMEOUT = 15.0

DEFAULT_MAX_RESULTS = 20
MIN_RESULTS = 1
MAX_RESULTS = 100


class PlacesError(Exception):
    """Base error for the places client."""


class MissingApiKeyError(PlacesError):
    """No API key configured."""

    def __init__(self, message: str = "Missing GOOGLE_MAPS_API_KEY"):
        super().__init__(message)


class PlacesApiError(PlacesError):
    """Upstream answered with a non-success status. Carries the raw body."""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(body or f"Places API returned HTTP {status_code}")


class BusinessRecord(BaseModel):
    """One business from a places search. Missing fields default to empty."""
    name: str = ""
    phone: str = ""
    address: str = ""
    rating: Optional[float] = None
    website: str = ""

    @classmethod
    def from_place(cls, place: dict[str, Any]) -> "BusinessRecord":
        display_name = place.get("displayName") or {}
        name = display_name.get("text", "") if isinstance(display_name, dict) else str(display_name)

        rating = place.get("rating")
        try:
            rating = float(rating) if rating not in (None, "") else None
        except (TypeError, ValueError):
            rating = None

        return cls(
            name=name or "",
            phone=place.get("internationalPhoneNumber") or "",
            address=place.get("formattedAddress") or "",
            rating=rating,
            website=place.get("websiteUri") or "",
        )


def clamp_max_results(value: Any, default: int = DEFAULT_MAX_RESULTS) -> int:
    """Clamp a requested result count to [1, 100]. Junk falls back to default."""
    if isinstance(value, bool):
        return default
    try:
        n = int(value)
    except (TypeError, ValueError):
        return default
    return max(MIN_RESULTS, min(MAX_RESULTS, n))


class PlacesClient:
    """Text search against the Places API.

    Args:
        api_key: Google Maps Platform key (sent as X-Goog-Api-Key)
        client: Shared httpx client. A short-lived one is created per call if omitted.
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        api_key: Optional[str],
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = API_TIMEOUT,
    ):
        self.api_key = api_key
        self.timeout = timeout
        self._client = client

    def _headers(self) -> dict:
        return {
            "Content-Type": "application/json",
            "X-Goog-Api-Key": self.api_key or "",
            "X-Goog-FieldMask": FIELD_MASK,
        }

    async def search(
        self,
        query: str,
        max_results: Any = DEFAULT_MAX_RESULTS,
    ) -> list[BusinessRecord]:
        """Search businesses by free text.

        Raises:
            MissingApiKeyError: No API key configured
            PlacesApiError: Upstream returned a non-2xx status
            httpx.HTTPError: Transport failure talking to the API
        """
        if not self.api_key:
            raise MissingApiKeyError()

        payload = {
            "textQuery": query,
            "maxResultCount": clamp_max_results(max_results),
        }

        if self._client is not None:
            resp = await self._post(self._client, payload)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await self._post(client, payload)

        if not resp.is_success:
            logger.warning(f"Places search '{query}' failed: HTTP {resp.status_code}")
            raise PlacesApiError(resp.status_code, resp.text)

        data = resp.json() or {}
        places = data.get("places") or []
        records = [BusinessRecord.from_place(p) for p in places if isinstance(p, dict)]

        logger.info(f"Places search '{query}': {len(records)} results")
        return records

    async def _post(self, client: httpx.AsyncClient, payload: dict) -> httpx.Response:
        return await client.post(
            PLACES_SEARCH_URL,
            headers=self._headers(),
            json=payload,
            timeout=self.timeout,
        )
