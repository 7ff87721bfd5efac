# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Same-domain breadth-first crawler used to discover extra fuzz targets."""

from __future__ import annotations

import logging
import re
from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass, field
from urllib.parse import urlsplit

from .client import HttpClient
from .headers import build_request_headers
from .heuristics import looks_like_endpoint, response_is_html
from .models import HttpRequest, RetryConfig
from .retry import send_with_retries
from .url import has_static_extension, is_non_navigable, normalize_url, resolve_link, same_site

logger = logging.getLogger(__name__)

HREF_RE = re.compile(r"""href\s*=\s*["']([^"'>]+)["']""", re.IGNORECASE)


@dataclass
class CrawlState:
    """Frontier, visited-set and discoveries for one crawl invocation."""

    frontier: deque[tuple[str, int]] = field(default_factory=deque)
    visited: set[str] = field(default_factory=set)
    found: set[str] = field(default_factory=set)

    def mark_visited(self, url: str) -> bool:
        """Insert ``url`` into the visited-set; False when it was already there."""
        before = len(self.visited)
        self.visited.add(url)
        return len(self.visited) != before


def extract_links(body: str) -> list[str]:
    """Return every ``href`` value in document order."""
    return [match.group(1) for match in HREF_RE.finditer(body or "")]


async def crawl(
    client: HttpClient,
    seed: str,
    *,
    max_depth: int = 2,
    max_pages: int = 100,
    cookies: Iterable[tuple[str, str]] = (),
    headers: Iterable[tuple[str, str]] = (),
    timeout: float | None = None,
) -> set[str]:
    """
    Discover same-domain URLs reachable from ``seed``.

    Guarantees:
    - only URLs sharing the seed's scheme and host are returned
    - at most ``max_pages`` URLs are returned, none more than ``max_depth`` links away
    - static assets (images, fonts, css/js, archives, pdf) are never returned
    - the seed itself and pages skipped for a non-HTML content type are not discoveries

    The crawl halts entirely once either budget is exhausted, so results may be a
    partial BFS level. Seeds that are not absolute http(s) URLs yield an empty set.
    """
    start = normalize_url(seed)
    if start is None:
        logger.info("Skipping crawl: cannot parse seed URL %r", seed)
        return set()

    request_headers = build_request_headers(headers, cookies)
    retry_once = RetryConfig(max_attempts=1)

    state = CrawlState()
    state.frontier.append((start, 0))
    state.mark_visited(start)

    while state.frontier:
        url, depth = state.frontier.popleft()
        if depth > max_depth or len(state.found) >= max_pages:
            break

        response = await send_with_retries(
            client,
            HttpRequest(url=url, headers=list(request_headers), timeout=timeout, allow_redirects=True),
            retry_config=retry_once,
        )
        if not response_is_html(response):
            logger.debug("crawl: skipping %s (status=%s, error=%s)", url, response.status_code, response.error_message)
            continue

        # Relative links resolve against the page the redirects landed on.
        final_url = normalize_url(response.url or url) or url
        if final_url != url:
            if not same_site(start, final_url):
                logger.debug("crawl: %s redirected off-site to %s", url, final_url)
                continue
            if not state.mark_visited(final_url):
                continue
            url = final_url
        logger.debug("crawl: fetched %s at depth %d", url, depth)

        child_depth = depth + 1
        if child_depth > max_depth:
            continue

        for href in extract_links(response.text):
            if len(state.found) >= max_pages:
                break
            if is_non_navigable(href):
                continue
            link = resolve_link(url, href)
            if link is None or not same_site(start, link):
                continue
            if not state.mark_visited(link):
                continue
            if has_static_extension(link):
                continue

            if looks_like_endpoint(urlsplit(link).path):
                logger.debug("crawl: %s looks like an API endpoint", link)
            state.found.add(link)
            if child_depth < max_depth:
                state.frontier.append((link, child_depth))

    return state.found


__all__ = ["CrawlState", "HREF_RE", "crawl", "extract_links"]
