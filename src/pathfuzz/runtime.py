# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""High-level pathfuzz facade for discovery and fuzzing workflows."""

from __future__ import annotations

import logging
import random
from collections.abc import Callable, Sequence
from contextlib import suppress

from .config import FailurePolicy, HttpSettings, RequestConfig, RunConfig, load_http_settings
from .http.client import HttpClient, create_default_http_client
from .http.crawl import crawl
from .http.models import RetryConfig
from .models.result import ResultCollection
from .scan.dispatcher import FuzzDispatcher, ProgressCallback, ResultCallback
from .scan.openapi import discover_openapi
from .scan.targets import build_targets, load_wordlist, mutate_wordlist

logger = logging.getLogger(__name__)

DiscoveryCallback = Callable[[str, str], None]


class PathFuzz:
    """
    Convenience wrapper that wires one shared HTTP client across crawl, OpenAPI and fuzz runs.

    The client is created from HttpSettings unless one is injected (tests pass a stub).
    """

    def __init__(
        self,
        http_client: HttpClient | None = None,
        *,
        settings: HttpSettings | None = None,
        proxy: str | None = None,
    ):
        self.http_settings = settings or load_http_settings()
        self.http_client = http_client or create_default_http_client(self.http_settings, proxy=proxy)

    @classmethod
    def from_run_config(cls, run_config: RunConfig, http_client: HttpClient | None = None) -> PathFuzz:
        return cls(http_client, settings=run_config.http_settings(), proxy=run_config.proxy)

    def collect_words(self, run_config: RunConfig, *, rng: random.Random | None = None) -> list[str]:
        """Wordlist entries, then their mutations, then payload-file entries."""
        words = load_wordlist(run_config.wordlist) if run_config.wordlist else []
        if run_config.mutate:
            words.extend(mutate_wordlist(words, rng))
        if run_config.payloads:
            words.extend(load_wordlist(run_config.payloads))
        return words

    async def crawl(
        self,
        seed: str,
        *,
        max_depth: int = 2,
        max_pages: int = 100,
        cookies: Sequence[tuple[str, str]] = (),
        headers: Sequence[tuple[str, str]] = (),
        timeout: float | None = None,
    ) -> set[str]:
        return await crawl(
            self.http_client,
            seed,
            max_depth=max_depth,
            max_pages=max_pages,
            cookies=cookies,
            headers=headers,
            timeout=timeout,
        )

    async def discover(self, run_config: RunConfig, *, on_discovered: DiscoveryCallback | None = None) -> set[str]:
        """Run the crawler and/or OpenAPI ingestion as configured."""
        discovered: set[str] = set()
        request_config = run_config.request_config()
        if run_config.crawl and run_config.url:
            found = await self.crawl(
                run_config.url,
                max_depth=run_config.crawl_depth,
                max_pages=run_config.crawl_pages,
                cookies=request_config.cookies,
                headers=request_config.headers,
                timeout=request_config.timeout,
            )
            for endpoint in sorted(found):
                if on_discovered is not None:
                    on_discovered("crawl", endpoint)
            discovered |= found

        if run_config.openapi:
            endpoints = await discover_openapi(
                self.http_client,
                run_config.openapi,
                base_url=run_config.url,
                headers=request_config.headers,
                cookies=request_config.cookies,
                bearer_token=request_config.bearer_token,
                timeout=request_config.timeout,
            )
            for endpoint in sorted(endpoints):
                if on_discovered is not None:
                    on_discovered("openapi", endpoint)
            discovered |= endpoints
        return discovered

    async def prepare_targets(
        self,
        run_config: RunConfig,
        *,
        on_discovered: DiscoveryCallback | None = None,
        rng: random.Random | None = None,
    ) -> list[str]:
        words = self.collect_words(run_config, rng=rng)
        discovered = await self.discover(run_config, on_discovered=on_discovered)
        return build_targets(run_config.url or "", words, discovered)

    async def fuzz(
        self,
        targets: Sequence[str],
        config: RequestConfig,
        *,
        failure_policy: FailurePolicy = FailurePolicy.DISCARD,
        on_progress: ProgressCallback | None = None,
        on_result: ResultCallback | None = None,
    ) -> ResultCollection:
        dispatcher = FuzzDispatcher(
            self.http_client,
            config,
            failure_policy=failure_policy,
            retry_config=RetryConfig.from_settings(self.http_settings),
            on_progress=on_progress,
            on_result=on_result,
        )
        results = await dispatcher.run(targets)
        logger.info("Fuzzing complete: %d/%d targets retained", len(results), dispatcher.processed)
        return results

    async def run(
        self,
        run_config: RunConfig,
        *,
        on_progress: ProgressCallback | None = None,
        on_result: ResultCallback | None = None,
        on_discovered: DiscoveryCallback | None = None,
    ) -> ResultCollection:
        """Discover, generate targets and fuzz them in one call."""
        targets = await self.prepare_targets(run_config, on_discovered=on_discovered)
        return await self.fuzz(
            targets,
            run_config.request_config(),
            failure_policy=run_config.failures,
            on_progress=on_progress,
            on_result=on_result,
        )

    async def aclose(self) -> None:
        with suppress(Exception):
            if hasattr(self.http_client, "aclose"):
                await self.http_client.aclose()

    async def __aenter__(self) -> PathFuzz:
        return self

    async def __aexit__(self, _exc_type, _exc, _tb) -> None:  # noqa: ANN001
        await self.aclose()
