"""
Lead finder configuration.

Loaded once at process start from the environment (and .env if present).
"""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from lib.contacts.website_scraper import DEFAULT_USER_AGENT, ScrapeOptions


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "y", "on")


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    try:
        return float(raw) if raw else default
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


class LeadFinderConfig(BaseModel):
    """Runtime settings for the lead finder service and CLI."""

    model_config = {"frozen": True}

    # Credentials
    google_maps_api_key: Optional[str] = Field(default=None, description="Places API key")

    # HTTP server
    port: int = Field(default=3000, description="Listening port")
    max_body_bytes: int = Field(default=2 * 1024 * 1024, description="Request body cap")

    # Outbound timeouts (seconds)
    fetch_timeout: float = Field(default=15.0, description="Landing page fetch timeout")
    link_timeout: float = Field(default=12.0, description="Contact page fetch timeout")
    places_timeout: float = Field(default=15.0, description="Places API timeout")
    dns_timeout: float = Field(default=5.0, description="MX lookup lifetime")

    # Scraping
    user_agent: str = DEFAULT_USER_AGENT
    add_scheme: bool = Field(default=True, description="Prefix https:// to scheme-less URLs")
    require_success: bool = Field(default=True, description="Ignore non-2xx page bodies")
    max_emails: int = 50
    max_contact_links: int = 3

    # Batch limits
    max_websites: int = Field(default=100, description="Websites processed per run")
    max_queries: int = Field(default=20, description="Search queries processed per run")
    default_max_results: int = 20

    # Verification
    verify_concurrency: int = Field(default=10, description="Concurrent MX lookups per item")

    def scrape_options(self) -> ScrapeOptions:
        return ScrapeOptions(
            timeout=self.fetch_timeout,
            link_timeout=self.link_timeout,
            user_agent=self.user_agent,
            add_scheme=self.add_scheme,
            require_success=self.require_success,
            max_contact_links=self.max_contact_links,
            max_emails=self.max_emails,
        )


def load_config() -> LeadFinderConfig:
    """Build config from environment variables."""
    load_dotenv()
    return LeadFinderConfig(
        google_maps_api_key=os.environ.get("GOOGLE_MAPS_API_KEY") or None,
        port=_env_int("PORT", 3000),
        fetch_timeout=_env_float("LEADFINDER_FETCH_TIMEOUT", 15.0),
        link_timeout=_env_float("LEADFINDER_LINK_TIMEOUT", 12.0),
        places_timeout=_env_float("LEADFINDER_PLACES_TIMEOUT", 15.0),
        dns_timeout=_env_float("LEADFINDER_DNS_TIMEOUT", 5.0),
        user_agent=os.environ.get("LEADFINDER_USER_AGENT") or DEFAULT_USER_AGENT,
        add_scheme=_env_bool("LEADFINDER_ADD_SCHEME", True),
        require_success=_env_bool("LEADFINDER_REQUIRE_SUCCESS", True),
        verify_concurrency=_env_int("LEADFINDER_VERIFY_CONCURRENCY", 10),
    )


_config: Optional[LeadFinderConfig] = None


def get_config() -> LeadFinderConfig:
    """Process-wide config, loaded on first use."""
    global _config
    if _config is None:
        _config = load_config()
    return _config
