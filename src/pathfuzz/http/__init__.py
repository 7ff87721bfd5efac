# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP client exports."""

from .adapters import StubHttpClient
from .client import HttpClient, create_default_http_client
from .crawl import CrawlState, crawl, extract_links
from .headers import build_request_headers, cookie_header, header_value
from .httpx_client import HttpxClient
from .models import HeaderList, HttpRequest, HttpResponse, RetryConfig
from .retry import build_default_retry_config, send_with_retries

__all__ = [
    "CrawlState",
    "HeaderList",
    "HttpClient",
    "HttpxClient",
    "HttpRequest",
    "HttpResponse",
    "RetryConfig",
    "StubHttpClient",
    "build_default_retry_config",
    "build_request_headers",
    "cookie_header",
    "crawl",
    "create_default_http_client",
    "extract_links",
    "header_value",
    "send_with_retries",
]
