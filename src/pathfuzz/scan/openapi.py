# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""OpenAPI / Swagger document ingestion for endpoint discovery."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any
from urllib.parse import urljoin, urlsplit

from ..http.client import HttpClient
from ..http.headers import build_request_headers
from ..http.models import HttpRequest, RetryConfig
from ..http.retry import send_with_retries

logger = logging.getLogger(__name__)

_PATH_PARAM_RE = re.compile(r"\{[^}/]*\}")
PATH_PARAM_PLACEHOLDER = "1"


def _origin(url: str) -> str:
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}"


def resolve_server_base(document: Mapping[str, Any], spec_url: str, base_url: str | None = None) -> str:
    """Pick the URL prefix that document paths are relative to."""
    servers = document.get("servers")
    if isinstance(servers, list) and servers and isinstance(servers[0], Mapping):
        server_url = str(servers[0].get("url") or "")
        if server_url:
            # Relative server URLs are resolved against the document location.
            return urljoin(spec_url, server_url).rstrip("/")

    host = document.get("host")
    if isinstance(host, str) and host:
        schemes = document.get("schemes")
        scheme = schemes[0] if isinstance(schemes, list) and schemes else urlsplit(spec_url).scheme or "https"
        base_path = str(document.get("basePath") or "")
        return f"{scheme}://{host}{base_path}".rstrip("/")

    return (base_url or _origin(spec_url)).rstrip("/")


def endpoints_from_document(document: Mapping[str, Any], spec_url: str, base_url: str | None = None) -> set[str]:
    """Return one URL per entry under ``paths`` with templated parameters filled in."""
    paths = document.get("paths")
    if not isinstance(paths, Mapping):
        return set()
    base = resolve_server_base(document, spec_url, base_url)
    endpoints: set[str] = set()
    for raw_path in paths:
        path = _PATH_PARAM_RE.sub(PATH_PARAM_PLACEHOLDER, str(raw_path))
        if not path.startswith("/"):
            path = f"/{path}"
        endpoints.add(f"{base}{path}")
    return endpoints


async def discover_openapi(
    client: HttpClient,
    spec_url: str,
    *,
    base_url: str | None = None,
    headers: Iterable[tuple[str, str]] = (),
    cookies: Iterable[tuple[str, str]] = (),
    bearer_token: str | None = None,
    timeout: float | None = None,
) -> set[str]:
    """Fetch an OpenAPI/Swagger JSON document and list its endpoints; empty set on any failure."""
    request = HttpRequest(
        url=spec_url,
        headers=build_request_headers(headers, cookies, bearer_token),
        timeout=timeout,
    )
    response = await send_with_retries(client, request, retry_config=RetryConfig(max_attempts=1))
    if response.transport_failed:
        logger.warning("Could not fetch OpenAPI document %s: %s", spec_url, response.error_message)
        return set()
    if response.status_code is not None and response.status_code >= 400:
        logger.warning("OpenAPI document %s returned HTTP %s", spec_url, response.status_code)
        return set()
    try:
        document = json.loads(response.text)
    except json.JSONDecodeError as exc:
        logger.warning("OpenAPI document %s is not valid JSON: %s", spec_url, exc)
        return set()
    if not isinstance(document, Mapping):
        logger.warning("OpenAPI document %s is not a JSON object", spec_url)
        return set()
    return endpoints_from_document(document, spec_url, base_url)


__all__ = ["discover_openapi", "endpoints_from_document", "resolve_server_base"]
