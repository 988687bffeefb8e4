"""Website scraping for publicly listed business emails.

Fetches the landing page, collects mailto: targets and plain-text emails,
then follows up to a few contact/about/support links and does the same there.

Every fetch is bounded by a timeout and failures are silent: a site that
can't be reached simply yields no emails.
"""

from typing import Optional
from urllib.parse import unquote, urljoin, urlparse

import httpx
from bs4 import BeautifulSoup
from loguru import logger
from pydantic import BaseModel

from lib.contacts.email_extractor import dedupe_emails, extract_emails, is_email

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (compatible; LeadFinder/1.0; +contact-discovery) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

# Link text / href fragments that suggest a page with contact details
CONTACT_KEYWORDS = ("contact", "about", "support")

SKIP_LINK_PREFIXES = ("mailto:", "tel:", "javascript:", "#")


class ScrapeOptions(BaseModel):
    """Knobs for one website scrape."""
    timeout: float = 15.0
    link_timeout: float = 12.0
    user_agent: str = DEFAULT_USER_AGENT
    add_scheme: bool = True  # prefix https:// when the URL has no scheme
    require_success: bool = True  # treat non-2xx responses as failures
    max_contact_links: int = 3
    max_emails: int = 50
    contact_keywords: tuple[str, ...] = CONTACT_KEYWORDS


def normalize_url(website: str, add_scheme: bool = True) -> str:
    """Strip whitespace and optionally prefix https:// to scheme-less URLs."""
    url = (website or "").strip()
    if add_scheme and url and not url.lower().startswith(("http://", "https://")):
        url = "https://" + url
    return url


async def fetch_html(
    client: httpx.AsyncClient,
    url: str,
    timeout: float,
    options: ScrapeOptions,
) -> Optional[str]:
    """Fetch a page body. None on any failure."""
    headers = {
        "User-Agent": options.user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.5",
    }
    try:
        resp = await client.get(url, headers=headers, timeout=timeout, follow_redirects=True)
    except Exception as e:
        logger.debug(f"Fetch failed for {url}: {type(e).__name__}: {e}")
        return None

    if options.require_success and not resp.is_success:
        logger.debug(f"Fetch {url}: HTTP {resp.status_code}")
        return None
    return resp.text


def extract_mailto_emails(soup: BeautifulSoup) -> list[str]:
    """Addresses from mailto: links, query string stripped."""
    emails = []
    for a in soup.find_all("a", href=True):
        href = a["href"].strip()
        if not href.lower().startswith("mailto:"):
            continue
        addr = unquote(href[len("mailto:"):].split("?", 1)[0]).strip()
        # mailto:a@x.com,b@x.com is legal
        for part in addr.split(","):
            part = part.strip()
            if is_email(part):
                emails.append(part)
    return dedupe_emails(emails)


def find_contact_links(
    soup: BeautifulSoup,
    base_url: str,
    keywords: tuple[str, ...] = CONTACT_KEYWORDS,
    limit: int = 3,
) -> list[str]:
    """Absolute URLs of links whose text or href mentions a contact keyword."""
    base = base_url.split("#", 1)[0]
    links: list[str] = []
    for a in soup.find_all("a", href=True):
        href = a["href"].strip()
        if not href or href.lower().startswith(SKIP_LINK_PREFIXES):
            continue

        text = a.get_text(" ", strip=True).lower()
        href_lower = href.lower()
        if not any(k in href_lower or k in text for k in keywords):
            continue

        try:
            absolute = urljoin(base, href).split("#", 1)[0]
        except ValueError:
            continue
        if urlparse(absolute).scheme not in ("http", "https"):
            continue
        if absolute == base or absolute in links:
            continue

        links.append(absolute)
        if len(links) >= limit:
            break
    return links


def _page_emails(html: str) -> tuple[list[str], BeautifulSoup]:
    """mailto emails followed by plain-text emails for one page."""
    soup = BeautifulSoup(html, "html.parser")
    emails = extract_mailto_emails(soup) + extract_emails(html)
    return emails, soup


async def scrape_website_emails(
    client: httpx.AsyncClient,
    website: str,
    options: Optional[ScrapeOptions] = None,
) -> list[str]:
    """Scrape a business website (plus a few contact pages) for emails.

    Args:
        client: httpx async client
        website: Site URL, scheme optional when options.add_scheme is set
        options: Timeouts, user agent, caps

    Returns:
        Unique lowercase emails in first-seen order, at most options.max_emails
    """
    options = options or ScrapeOptions()
    if not website or not website.strip():
        return []

    url = normalize_url(website, add_scheme=options.add_scheme)
    html = await fetch_html(client, url, options.timeout, options)
    if not html:
        return []

    found, soup = _page_emails(html)

    contact_links = find_contact_links(
        soup, url, keywords=options.contact_keywords, limit=options.max_contact_links,
    )
    for link in contact_links:
        try:
            sub_html = await fetch_html(client, link, options.link_timeout, options)
            if sub_html:
                sub_emails, _ = _page_emails(sub_html)
                found.extend(sub_emails)
        except Exception as e:
            logger.debug(f"Contact page {link} failed: {e}")

    emails = dedupe_emails(found, limit=options.max_emails)
    logger.debug(
        f"Scraped {url}: {len(emails)} emails "
        f"({len(contact_links)} contact pages followed)"
    )
    return emails
