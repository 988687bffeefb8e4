"""Plain-text email extraction.

Purely lexical: finds substrings shaped like local-part@domain.tld.
Says nothing about deliverability, see mx_validator for that.
"""

import re
from typing import Iterable, Optional

EMAIL_REGEX = re.compile(r"[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}")


def dedupe_emails(emails: Iterable[str], limit: Optional[int] = None) -> list[str]:
    """Lowercase, drop duplicates preserving first-seen order, optionally cap."""
    seen = dict.fromkeys(e.strip().lower() for e in emails if e and e.strip())
    result = list(seen)
    if limit is not None:
        result = result[:limit]
    return result


def extract_emails(text: Optional[str]) -> list[str]:
    """Extract unique lowercase email addresses from a block of text or HTML."""
    if not text:
        return []
    return dedupe_emails(EMAIL_REGEX.findall(text))


def is_email(value: str) -> bool:
    """True if the whole string is shaped like an email address."""
    return bool(value) and EMAIL_REGEX.fullmatch(value) is not None
