import argparse
import logging
import sys
import json
import os
from typing import List
from concurrent.futures import ThreadPoolExecutor, as_completed
from colorama import Fore, Style, init

from .client import ListingClient
from .config import load_config
from .errors import ListingError
from .fetcher.base import ListingRecord
from .fetcher.playstore import PlayStoreFetcher
from .server import create_app

init(autoreset=True)

logger = logging.getLogger("listingscout")


def setup_logging(level: str):
    numeric = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        stream=sys.stdout
    )


def print_record(identifier: str, record: ListingRecord):
    print(f"{Fore.CYAN}{Style.BRIGHT}\n→ {identifier}{Style.RESET_ALL}")
    print(
        f"  • Name        : {record.name}\n"
        f"  • Developer   : {record.developer_name or 'N/A'}\n"
        f"  • Category    : {record.category or 'N/A'}"
        + (f" / {record.sub_category}" if record.sub_category else "") + "\n"
        f"  • Rating      : {record.rating:.1f}\n"
        f"  • Version     : {record.version}\n"
        f"  • Downloads   : {record.download_count_label}\n"
        f"  • Icon        : {record.icon_url or 'N/A'}\n"
        f"  • Screenshots : {len(record.screenshot_urls)}\n"
        f"  • Summary     : {record.short_description or 'N/A'}"
    )


def read_identifiers(args) -> List[str]:
    identifiers = list(args.identifiers or [])
    if args.bulk:
        if not os.path.exists(args.bulk):
            raise SystemExit(f"Bulk file '{args.bulk}' does not exist.")
        with open(args.bulk, encoding="utf-8") as f:
            identifiers.extend(line.strip() for line in f if line.strip())
    return identifiers


def run_fetch(args, config) -> int:
    identifiers = read_identifiers(args)
    if not identifiers:
        logger.error("No package name provided and --bulk not specified.")
        return 2

    if args.via_api:
        fetch = ListingClient.from_config(config.client).request_listing
    else:
        fetch = PlayStoreFetcher(config.fetcher).fetch_listing
    results = {}
    failures = 0
    with ThreadPoolExecutor(max_workers=max(1, args.threads)) as executor:
        futures = {executor.submit(fetch, ident): ident for ident in identifiers}
        for future in as_completed(futures):
            ident = futures[future]
            try:
                record = future.result()
            except ListingError as e:
                failures += 1
                print(f"{Fore.RED}[✗]{Style.RESET_ALL} {ident}: {e}")
                continue
            results[ident] = record
            if not args.json and not args.quiet:
                print_record(ident, record)

    if args.json:
        print(json.dumps({k: v.to_dict() for k, v in results.items()}, indent=2, ensure_ascii=False))

    print(f"\n  {Fore.BLUE}[SUMMARY]{Style.RESET_ALL} {len(results)} fetched, {failures} failed", file=sys.stderr)
    return 1 if failures else 0


def run_serve(args, config) -> int:
    app = create_app(config)
    host = args.host or config.server.host
    port = args.port or config.server.port
    logger.info("Serving listing API on %s:%d", host, port)
    app.run(host=host, port=port)
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(description="listingscout: Play Store listing fetcher")
    parser.add_argument("--config", "-c", default="config.yml", help="Path to config.yml")
    parser.add_argument("--log-level", default=None, help="Override the configured log level")
    parser.add_argument("--quiet", action="store_true", help="Suppress detailed output")
    sub = parser.add_subparsers(dest="command", required=True)

    p_fetch = sub.add_parser("fetch", help="Fetch and print listing records")
    p_fetch.add_argument("identifiers", nargs="*", help="Package names, e.g. com.example.app")
    p_fetch.add_argument("--json", action="store_true", help="Print records as JSON")
    p_fetch.add_argument("--bulk", help="Path to file containing package names (one per line)")
    p_fetch.add_argument("--threads", type=int, default=4, help="Number of threads for bulk fetches")
    p_fetch.add_argument("--via-api", action="store_true", help="Fetch through the listing API configured under client:")

    p_serve = sub.add_parser("serve", help="Run the listing HTTP API")
    p_serve.add_argument("--host", default=None)
    p_serve.add_argument("--port", type=int, default=None)

    args = parser.parse_args(argv)

    config = load_config(args.config)
    level = args.log_level or config.logging.get("level", "INFO")
    if args.quiet:
        level = "ERROR"
    setup_logging(level)

    if args.command == "fetch":
        return run_fetch(args, config)
    return run_serve(args, config)


if __name__ == "__main__":
    sys.exit(main())
