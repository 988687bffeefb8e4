"""MX-based email deliverability heuristic.

Proves the domain can receive mail, not that the mailbox exists.
Disposable providers are rejected before any DNS query.
"""

import asyncio
from typing import Iterable, Optional

import dns.asyncresolver
from loguru import logger

DNS_TIMEOUT = 5.0

# Accept mail fine but the addresses are throwaway
DISPOSABLE_DOMAINS = frozenset({
    "mailinator.com",
    "tempmail.com",
    "10minutemail.com",
    "guerrillamail.com",
    "yopmail.com",
    "sharklasers.com",
    "trashmail.com",
    "throwawaymail.com",
    "getnada.com",
    "maildrop.cc",
    "dispostable.com",
    "temp-mail.org",
})

_resolver = None


def _get_resolver() -> dns.asyncresolver.Resolver:
    global _resolver
    if _resolver is None:
        _resolver = dns.asyncresolver.Resolver()
        _resolver.timeout = DNS_TIMEOUT
        _resolver.lifetime = DNS_TIMEOUT
    return _resolver


def email_domain(email: Optional[str]) -> Optional[str]:
    """Domain part of an email (after the last @), lowercased. None if absent."""
    if not email or "@" not in email:
        return None
    domain = email.rsplit("@", 1)[1].strip().lower().rstrip(".")
    return domain or None


def is_disposable(domain: str) -> bool:
    return domain.lower() in DISPOSABLE_DOMAINS


async def has_mx(domain: str, timeout: float = DNS_TIMEOUT) -> bool:
    """True iff the domain publishes at least one MX record.

    NXDOMAIN, no answer, timeouts and malformed names all count as False.
    """
    try:
        answer = await _get_resolver().resolve(domain, "MX", lifetime=timeout)
        return len(answer) > 0
    except Exception as e:
        logger.debug(f"MX lookup failed for {domain}: {type(e).__name__}: {e}")
        return False


async def is_deliverable(email: str, timeout: float = DNS_TIMEOUT) -> bool:
    """Check whether an email's domain looks able to receive mail. Never raises."""
    domain = email_domain(email)
    if not domain:
        return False
    if is_disposable(domain):
        return False
    return await has_mx(domain, timeout=timeout)


async def verify_emails(
    emails: Iterable[str],
    concurrency: int = 10,
    timeout: float = DNS_TIMEOUT,
) -> list[str]:
    """Return the deliverable subset of emails, in input order.

    One check per email, all launched at once but at most `concurrency`
    DNS queries in flight.
    """
    emails = list(emails)
    if not emails:
        return []

    sem = asyncio.Semaphore(max(1, concurrency))

    async def check_one(email: str) -> bool:
        async with sem:
            return await is_deliverable(email, timeout=timeout)

    results = await asyncio.gather(*[check_one(e) for e in emails])
    verified = [email for email, ok in zip(emails, results) if ok]

    logger.debug(f"MX verification: {len(verified)}/{len(emails)} deliverable")
    return verified
