# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
pathfuzz package entrypoint.

This package provides a bounded-concurrency web endpoint fuzzer and a same-domain
breadth-first crawler that feeds it. HTTP behavior is abstracted behind an injectable
async client interface, and domain objects are modeled with typed dataclasses.
"""

from .config import FailurePolicy, HttpSettings, RequestConfig, RunConfig, load_http_settings, load_run_config
from .errors import ConfigError, ExportError, PathFuzzError
from .http import (
    HttpClient,
    HttpRequest,
    HttpResponse,
    HttpxClient,
    RetryConfig,
    StubHttpClient,
    crawl,
    create_default_http_client,
)
from .log import setup_logging
from .models import FuzzResult, ResultCollection
from .runtime import PathFuzz
from .scan import FuzzDispatcher, build_targets, has_error_signature, is_reflected
from .version import __version__

__all__ = [
    "ConfigError",
    "ExportError",
    "FailurePolicy",
    "FuzzDispatcher",
    "FuzzResult",
    "HttpClient",
    "HttpRequest",
    "HttpResponse",
    "HttpSettings",
    "HttpxClient",
    "PathFuzz",
    "PathFuzzError",
    "RequestConfig",
    "ResultCollection",
    "RetryConfig",
    "RunConfig",
    "StubHttpClient",
    "build_targets",
    "crawl",
    "create_default_http_client",
    "has_error_signature",
    "is_reflected",
    "load_http_settings",
    "load_run_config",
    "setup_logging",
    "__version__",
]
