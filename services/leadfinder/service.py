"""Lead finder service - places search, website scraping, MX verification.

Two input modes share one pipeline:
  - websites: scrape each given URL
  - places: search each query, then scrape every result that has a website

Items are processed one after another. Within an item, MX checks for the
discovered emails run concurrently (bounded by config.verify_concurrency).
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional, Union

import httpx
from loguru import logger

from lib.contacts import mx_validator
from lib.contacts.website_scraper import scrape_website_emails
from lib.places.api_client import BusinessRecord, MissingApiKeyError, PlacesClient
from services.leadfinder.config import LeadFinderConfig, get_config
from services.leadfinder.csv_export import render_csv
from services.leadfinder.errors import InvalidRequestError
from services.leadfinder.models import PlaceCsvRow, PlacesCsvResult, ResultRow, RunMode


class IService(ABC):
    """Lead finder service."""

    @abstractmethod
    async def run(
        self,
        mode: Union[RunMode, str, None],
        items: Optional[List[str]],
        max_results: Any = None,
        verify: bool = False,
    ) -> List[ResultRow]:
        """
        Find emails for a batch of websites or search queries.

        Args:
            mode: "websites" or "places" (default)
            items: URLs or free-text queries, must be non-empty
            max_results: Places per query, clamped to [1, 100]
            verify: Keep only MX-deliverable emails in verified_emails

        Returns:
            One row per website / business, in processing order
        """
        pass

    @abstractmethod
    async def places_to_csv(
        self,
        text_query: Optional[str],
        max_results: Any = None,
        verify: bool = False,
    ) -> PlacesCsvResult:
        """Search one query and return rows plus a rendered CSV."""
        pass


class Service(IService):
    def __init__(
        self,
        config: Optional[LeadFinderConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config or get_config()
        self._transport = transport
        self._scrape_options = self.config.scrape_options()

    def _http_client(self) -> httpx.AsyncClient:
        kwargs = {"timeout": self.config.fetch_timeout}
        if self._transport is not None:
            kwargs["transport"] = self._transport
        return httpx.AsyncClient(**kwargs)

    # =========================================================================
    # Public API
    # =========================================================================

    async def run(
        self,
        mode: Union[RunMode, str, None],
        items: Optional[List[str]],
        max_results: Any = None,
        verify: bool = False,
    ) -> List[ResultRow]:
        run_mode = _parse_mode(mode)
        clean_items = _clean_items(items)

        if run_mode == RunMode.PLACES:
            self._require_api_key()

        async with self._http_client() as client:
            if run_mode == RunMode.WEBSITES:
                rows = await self._run_websites(client, clean_items, verify)
            else:
                rows = await self._run_places(client, clean_items, max_results, verify)

        logger.info(
            f"Run complete: mode={run_mode.value} items={len(clean_items)} rows={len(rows)} "
            f"emails={sum(len(r.emails) for r in rows)} "
            f"verified={sum(len(r.verified_emails) for r in rows)}"
        )
        return rows

    async def places_to_csv(
        self,
        text_query: Optional[str],
        max_results: Any = None,
        verify: bool = False,
    ) -> PlacesCsvResult:
        self._require_api_key()
        if not text_query or not str(text_query).strip():
            raise InvalidRequestError("textQuery required")

        if max_results is None:
            max_results = self.config.default_max_results

        async with self._http_client() as client:
            rows = await self._rows_for_query(client, str(text_query).strip(), max_results, verify)

        return PlacesCsvResult(
            count=len(rows),
            rows=[PlaceCsvRow.from_row(r) for r in rows],
            csv=render_csv(rows),
        )

    # =========================================================================
    # Pipeline
    # =========================================================================

    async def _run_websites(
        self,
        client: httpx.AsyncClient,
        websites: List[str],
        verify: bool,
    ) -> List[ResultRow]:
        if len(websites) > self.config.max_websites:
            logger.info(f"Truncating {len(websites)} websites to {self.config.max_websites}")
        rows = []
        for website in websites[: self.config.max_websites]:
            emails, verified = await self._emails_for_website(client, website, verify)
            rows.append(ResultRow(website=website, emails=emails, verified_emails=verified))
        return rows

    async def _run_places(
        self,
        client: httpx.AsyncClient,
        queries: List[str],
        max_results: Any,
        verify: bool,
    ) -> List[ResultRow]:
        if max_results is None:
            max_results = self.config.default_max_results
        if len(queries) > self.config.max_queries:
            logger.info(f"Truncating {len(queries)} queries to {self.config.max_queries}")

        rows = []
        for query in queries[: self.config.max_queries]:
            rows.extend(await self._rows_for_query(client, query, max_results, verify))
        return rows

    async def _rows_for_query(
        self,
        client: httpx.AsyncClient,
        query: str,
        max_results: Any,
        verify: bool,
    ) -> List[ResultRow]:
        places = PlacesClient(
            self.config.google_maps_api_key,
            client=client,
            timeout=self.config.places_timeout,
        )
        businesses = await places.search(query, max_results)

        rows = []
        for business in businesses:
            rows.append(await self._row_for_business(client, business, verify))
        return rows

    async def _row_for_business(
        self,
        client: httpx.AsyncClient,
        business: BusinessRecord,
        verify: bool,
    ) -> ResultRow:
        emails: List[str] = []
        verified: List[str] = []
        if business.website:
            emails, verified = await self._emails_for_website(client, business.website, verify)
        return ResultRow.for_business(business, emails, verified)

    async def _emails_for_website(
        self,
        client: httpx.AsyncClient,
        website: str,
        verify: bool,
    ) -> tuple[List[str], List[str]]:
        emails = await scrape_website_emails(client, website, self._scrape_options)
        verified: List[str] = []
        if verify and emails:
            verified = await mx_validator.verify_emails(
                emails,
                concurrency=self.config.verify_concurrency,
                timeout=self.config.dns_timeout,
            )
        return emails, verified

    def _require_api_key(self) -> None:
        if not self.config.google_maps_api_key:
            raise MissingApiKeyError()


def _parse_mode(mode: Union[RunMode, str, None]) -> RunMode:
    if mode is None or mode == "":
        return RunMode.PLACES
    try:
        return RunMode(str(mode.value if isinstance(mode, RunMode) else mode).strip().lower())
    except ValueError:
        raise InvalidRequestError(f"Unknown mode: {mode}. Use 'websites' or 'places'")


def _clean_items(items: Optional[List[str]]) -> List[str]:
    if not isinstance(items, list):
        raise InvalidRequestError("items must be a non-empty list")
    cleaned = [str(i).strip() for i in items if i is not None and str(i).strip()]
    if not cleaned:
        raise InvalidRequestError("items must be a non-empty list")
    return cleaned
