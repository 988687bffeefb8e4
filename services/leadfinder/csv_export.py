"""CSV rendering for lead finder results."""

import csv
import io
from typing import Iterable, Optional

from services.leadfinder.models import ResultRow

CSV_HEADER = [
    "Business Name",
    "Phone",
    "Website",
    "Address",
    "Rating",
    "Emails",
    "Verified Emails",
]

EMAIL_SEPARATOR = " | "


def _format_rating(rating: Optional[float]) -> str:
    if rating is None:
        return ""
    # 4.0 -> "4", 4.5 -> "4.5"
    return f"{rating:g}"


def row_to_fields(row: ResultRow) -> list[str]:
    return [
        row.name,
        row.phone,
        row.website,
        row.address,
        _format_rating(row.rating),
        EMAIL_SEPARATOR.join(row.emails),
        EMAIL_SEPARATOR.join(row.verified_emails),
    ]


def render_csv(rows: Iterable[ResultRow]) -> str:
    """Header plus one line per row. Every field quoted, quotes doubled."""
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    buf.write(",".join(CSV_HEADER) + "\n")
    for row in rows:
        writer.writerow(row_to_fields(row))
    return buf.getvalue().rstrip("\n")
