"""
Workflow: Find Leads
====================
Find publicly listed business emails from the command line.

  websites mode: scrape each URL (landing page + contact/about/support pages)
  places mode:   search Google Places for each query, then scrape each result

USAGE:
    # Scrape a couple of websites
    uv run python -m workflows.find_leads --mode websites example.com acme.org

    # Places search with MX verification, write CSV
    uv run python -m workflows.find_leads --mode places "coffee shops in Seattle" --verify --csv leads.csv

    # Items from a file (one per line)
    uv run python -m workflows.find_leads --mode websites --file sites.txt --json rows.json
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import argparse
import asyncio
import json
from typing import List, Optional

from loguru import logger

from lib.places.api_client import MissingApiKeyError
from services.leadfinder import InvalidRequestError, ResultRow, Service
from services.leadfinder.csv_export import render_csv


def read_items(items: List[str], file: Optional[str]) -> List[str]:
    """Positional items followed by non-blank, non-comment lines from file."""
    result = list(items)
    if file:
        for line in Path(file).read_text().splitlines():
            line = line.strip()
            if line and not line.startswith("#"):
                result.append(line)
    return result


async def run(
    mode: str,
    items: List[str],
    max_results: Optional[int] = None,
    verify: bool = False,
    csv_path: Optional[str] = None,
    json_path: Optional[str] = None,
) -> List[ResultRow]:
    service = Service()
    rows = await service.run(mode=mode, items=items, max_results=max_results, verify=verify)

    for row in rows:
        label = row.name or row.website
        logger.info(f"{label}: {len(row.emails)} emails, {len(row.verified_emails)} verified")

    if csv_path:
        Path(csv_path).write_text(render_csv(rows) + "\n")
        logger.info(f"Wrote {len(rows)} rows to {csv_path}")
    if json_path:
        Path(json_path).write_text(json.dumps([r.model_dump(by_alias=True) for r in rows], indent=2))
        logger.info(f"Wrote {len(rows)} rows to {json_path}")

    logger.info("=" * 50)
    logger.info(f"Rows: {len(rows)}")
    logger.info(f"Emails found: {sum(len(r.emails) for r in rows)}")
    if verify:
        logger.info(f"Emails verified: {sum(len(r.verified_emails) for r in rows)}")
    return rows


def main():
    parser = argparse.ArgumentParser(description="Find business emails from websites or places searches")
    parser.add_argument("items", nargs="*", help="Website URLs or search queries")
    parser.add_argument("--mode", choices=["websites", "places"], default="places", help="Input mode (default: places)")
    parser.add_argument("--file", type=str, help="Read additional items from file, one per line")
    parser.add_argument("--max-results", type=int, default=None, help="Places per query (1-100, default: 20)")
    parser.add_argument("--verify", action="store_true", help="Verify email domains via MX lookup")
    parser.add_argument("--csv", type=str, help="Write results as CSV to this path")
    parser.add_argument("--json", type=str, help="Write results as JSON to this path")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")

    args = parser.parse_args()

    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if args.debug else "INFO", format="<level>{level: <8}</level> | {message}")

    items = read_items(args.items, args.file)
    if not items:
        parser.error("Provide at least one item or --file")

    try:
        asyncio.run(run(
            mode=args.mode,
            items=items,
            max_results=args.max_results,
            verify=args.verify,
            csv_path=args.csv,
            json_path=args.json,
        ))
    except (InvalidRequestError, MissingApiKeyError) as e:
        logger.error(str(e))
        sys.exit(2)


if __name__ == "__main__":
    main()
