"""CLI entrypoint: fetch a Zotero collection and print it as a listing."""

from __future__ import annotations

import argparse
import logging
import sys

from dotenv import load_dotenv

from config import load_config, parse_expand
from errors import ZoteroPublicationsError
from report import render_listing, write_csv_summary
from zotero_feed import fetch_all


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line flags."""
    parser = argparse.ArgumentParser(description="Fetch every item of a Zotero collection and list it")
    parser.add_argument(
        "endpoint",
        help="API endpoint relative to the API base, e.g. users/475425/publications/items",
    )
    parser.add_argument("--api-base", default=None, help="API host (default api.zotero.org)")
    parser.add_argument("--limit", type=int, default=None, help="Page size for each request (default 100)")
    parser.add_argument("--style", dest="citation_style", default=None, help="Citation style identifier")
    parser.add_argument(
        "--group",
        choices=["none", "type", "collection"],
        default=None,
        help="Group the listing by item type ('collection' is not supported yet)",
    )
    parser.add_argument(
        "--expand",
        default=None,
        help="'all' or a comma-separated list of item types shown expanded when grouped",
    )
    parser.add_argument("--max-items", type=int, default=None, help="Stop after this many items")
    parser.add_argument("--csv", dest="csv_path", default=None, help="Also write a CSV summary to this path")
    return parser.parse_args(argv)


def run(args: argparse.Namespace) -> int:
    """Fetch, render and optionally export one collection. Returns an exit code."""
    config = load_config(
        api_base=args.api_base,
        limit=args.limit,
        citation_style=args.citation_style,
        group=args.group,
        expand=parse_expand(args.expand) if args.expand is not None else None,
        max_items=args.max_items,
    )

    try:
        dataset = fetch_all(args.endpoint, config)
    except (ZoteroPublicationsError, NotImplementedError) as exc:
        logging.exception("Failed fetching endpoint=%s: %s", args.endpoint, exc)
        return 1

    logging.info("Fetched %s items from %s (mode=%s)", dataset.size, args.endpoint, dataset.mode)
    print(render_listing(dataset))

    if args.csv_path:
        write_csv_summary(dataset, args.csv_path)
    return 0


def main(argv: list[str] | None = None) -> None:
    """Initialize config and execute one fetch."""
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    args = parse_args(argv)
    sys.exit(run(args))


if __name__ == "__main__":
    main()
