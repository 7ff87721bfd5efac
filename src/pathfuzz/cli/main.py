# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""pathfuzz CLI."""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Any

from tqdm import tqdm

from ..config import FailurePolicy, RunConfig, load_run_config, split_kv
from ..errors import ConfigError, ExportError
from ..log import setup_logging
from ..models.result import FuzzResult
from ..report.analyze import format_summary, format_table, summarize
from ..report.export import export_results, load_results
from ..runtime import PathFuzz
from ..version import __version__

PROGRESS_BAR_FORMAT = "[{elapsed}] [{bar:40}] {n_fmt}/{total_fmt} ({remaining})"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pathfuzz",
        description="Concurrent web endpoint fuzzer with same-domain crawling",
    )
    parser.add_argument("-c", "--config", metavar="FILE", help="Path to TOML config file")
    parser.add_argument("-u", "--url", help="Target URL to fuzz (overrides config)")
    parser.add_argument("-w", "--wordlist", metavar="FILE", help="Path to the wordlist (overrides config)")
    parser.add_argument("-t", "--threads", type=int, metavar="NUMBER", help="Maximum concurrent requests (default: 40)")
    parser.add_argument("-T", "--timeout", type=float, metavar="SECONDS", help="Request timeout in seconds (default: 10)")
    parser.add_argument(
        "-m",
        "--matcher",
        metavar="CODES",
        help="Comma-separated status codes to keep (default: 200,301,302,401,403,405,500)",
    )
    parser.add_argument(
        "--header",
        dest="headers",
        action="append",
        metavar="HEADER",
        help="Custom header as key:value (repeatable)",
    )
    parser.add_argument(
        "--cookie",
        dest="cookies",
        action="append",
        metavar="COOKIE",
        help="Custom cookie as key:value (repeatable)",
    )
    parser.add_argument("--auth-token", dest="auth_token", metavar="TOKEN", help="Bearer token (sent last, replaces any Authorization header)")
    parser.add_argument("--proxy", help="Proxy URL (http/https/socks5)")
    parser.add_argument("--rate-limit", dest="rate_limit", type=int, metavar="MS", help="Delay before each request in milliseconds")
    parser.add_argument("--export", metavar="FILE", help="Export results to file (.json or .csv)")
    parser.add_argument("--mutate", action="store_const", const=True, help="Add static mutations of every word")
    parser.add_argument("--payloads", metavar="FILE", help="Additional payloads file appended to the wordlist")
    parser.add_argument("--crawl", action="store_const", const=True, help="Crawl the target for more endpoints")
    parser.add_argument("--crawl-depth", dest="crawl_depth", type=int, metavar="N", help="Maximum link depth when crawling (default: 2)")
    parser.add_argument("--crawl-pages", dest="crawl_pages", type=int, metavar="N", help="Maximum discovered URLs when crawling (default: 100)")
    parser.add_argument("--openapi", metavar="URL", help="OpenAPI/Swagger JSON document to pull endpoints from")
    parser.add_argument("--analyze", metavar="FILE", help="Summarize a previous .json/.csv export and exit")
    parser.add_argument(
        "--failures",
        choices=[policy.value for policy in FailurePolicy],
        help="What to do with requests that got no HTTP response (default: discard)",
    )
    parser.add_argument("--retries", type=int, metavar="N", help="Retries for transport failures (default: 0)")
    parser.add_argument(
        "--ignore-ssl-errors",
        action="store_true",
        help="Skip TLS verification (useful for lab/self-signed targets)",
    )
    parser.add_argument("--no-progress", action="store_true", help="Disable the progress bar")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v info, -vv debug, -vvv include httpx)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _overrides_from_args(args: argparse.Namespace) -> dict[str, Any]:
    return {
        "url": args.url,
        "wordlist": args.wordlist,
        "threads": args.threads,
        "timeout": args.timeout,
        "matcher": args.matcher,
        "headers": [split_kv(item) for item in args.headers] if args.headers else None,
        "cookies": [split_kv(item) for item in args.cookies] if args.cookies else None,
        "auth_token": args.auth_token,
        "proxy": args.proxy,
        "rate_limit": args.rate_limit,
        "export": args.export,
        "mutate": args.mutate,
        "payloads": args.payloads,
        "crawl": args.crawl,
        "crawl_depth": args.crawl_depth,
        "crawl_pages": args.crawl_pages,
        "openapi": args.openapi,
        "analyze": args.analyze,
        "failures": args.failures,
        "retries": args.retries,
        "verify_ssl": False if args.ignore_ssl_errors else None,
    }


def _print_banner(config: RunConfig) -> None:
    print(f"pathfuzz v{__version__}")
    print(":: Method           : GET")
    print(f":: URL              : {config.url}")
    print(f":: Wordlist         : {config.wordlist or '-'}")
    print(f":: Threads          : {config.threads}")
    print(f":: Timeout          : {config.timeout:g} seconds")
    print(f":: Matcher          : {sorted(config.match_codes)}")
    if config.rate_limit:
        print(f":: Rate limit       : {config.rate_limit} ms")
    if config.proxy:
        print(f":: Proxy            : {config.proxy}")
    if config.export:
        print(f":: Export           : {config.export}")
    print()


def _format_result(result: FuzzResult) -> str:
    if result.transport_failed:
        return f"ERR  - {result.url} [error: {result.error}]"
    markers = (" [REFLECTED]" if result.reflected else "") + (" [ERROR]" if result.error else "")
    return f"{result.status} - {result.url}{markers}"


def _print_discovered(source: str, url: str) -> None:
    label = "OpenAPI endpoint" if source == "openapi" else "Discovered endpoint"
    tqdm.write(f":: {label}: {url}")


async def _run(config: RunConfig, *, show_progress: bool = True) -> list[FuzzResult]:
    async with PathFuzz.from_run_config(config) as fuzzer:
        targets = await fuzzer.prepare_targets(config, on_discovered=_print_discovered)
        with tqdm(total=len(targets), disable=not show_progress, bar_format=PROGRESS_BAR_FORMAT) as bar:
            results = await fuzzer.fuzz(
                targets,
                config.request_config(),
                failure_policy=config.failures,
                on_progress=bar.update,
                on_result=lambda result: tqdm.write(_format_result(result)),
            )
    print(":: Fuzzing complete!")
    return results.snapshot()


def _analyze(path: str) -> int:
    try:
        results = load_results(path)
    except ExportError as exc:
        print(f"pathfuzz: error: {exc}", file=sys.stderr)
        return 1
    print(f":: Analyzing {path}")
    print(format_summary(summarize(results)))
    print()
    print(format_table(results))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(verbose=args.verbose)

    if not (args.config or args.wordlist or args.crawl or args.analyze):
        parser.error("one of --config, --wordlist, --crawl or --analyze is required")

    try:
        config = load_run_config(args.config, _overrides_from_args(args))
    except ConfigError as exc:
        print(f"pathfuzz: error: {exc}", file=sys.stderr)
        return 1

    if config.analyze:
        return _analyze(config.analyze)

    if not (config.wordlist or config.crawl or config.openapi):
        print("pathfuzz: error: nothing to do; supply a wordlist, --crawl or --openapi", file=sys.stderr)
        return 1

    _print_banner(config)
    try:
        results = asyncio.run(_run(config, show_progress=not args.no_progress))
    except ConfigError as exc:
        print(f"pathfuzz: error: {exc}", file=sys.stderr)
        return 1

    if config.export:
        try:
            count = export_results(results, config.export)
        except ExportError as exc:
            print(f"pathfuzz: error: {exc}", file=sys.stderr)
        else:
            print(f":: {count} results exported to {config.export}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
