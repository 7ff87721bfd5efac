# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Heuristics for interpreting HTTP responses and discovered URLs."""

from __future__ import annotations

import re
from collections.abc import Mapping

from .headers import header_value
from .models import HttpResponse

_ENDPOINT_HINT_RE = re.compile(r"api|rest|openapi|swagger|v\d+", re.IGNORECASE)


def is_html_content_type(headers: Mapping[str, str] | None) -> bool:
    """Return True when Content-Type starts with ``text/html``."""
    return header_value(headers, "content-type").lower().startswith("text/html")


def response_is_html(response: HttpResponse | None) -> bool:
    if response is None or response.transport_failed:
        return False
    return is_html_content_type(response.headers)


def looks_like_endpoint(url: str) -> bool:
    """Hint that a URL is an API endpoint; informational only."""
    return bool(_ENDPOINT_HINT_RE.search(url or ""))


__all__ = ["is_html_content_type", "looks_like_endpoint", "response_is_html"]
