# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Header construction and lookup utilities.

HTTP header field names are case-insensitive (RFC 9110). Requests carry headers as an
ordered list of pairs so repeated names are sent as given, while responses are stored
as lowercase-keyed dicts.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from .models import HeaderList


def cookie_header(cookies: Iterable[tuple[str, str]]) -> str:
    """Join cookie pairs into one ``Cookie`` value, keeping configuration order."""
    return "; ".join(f"{key}={value}" for key, value in cookies)


def build_request_headers(
    headers: Iterable[tuple[str, str]] = (),
    cookies: Iterable[tuple[str, str]] = (),
    bearer_token: str | None = None,
) -> HeaderList:
    """
    Assemble the header list for one request.

    Order: custom headers as configured (duplicates kept), then a single joined
    ``Cookie`` header, then ``Authorization: Bearer``. When a bearer token is set,
    custom ``Authorization`` headers are dropped so the token always wins.
    """
    out: HeaderList = []
    for key, value in headers:
        if bearer_token and key.lower() == "authorization":
            continue
        out.append((key, value))

    cookie_pairs = list(cookies)
    if cookie_pairs:
        out.append(("Cookie", cookie_header(cookie_pairs)))

    if bearer_token:
        out.append(("Authorization", f"Bearer {bearer_token}"))
    return out


def has_header(headers: Iterable[tuple[str, str]], name: str) -> bool:
    lower = name.lower()
    return any(key.lower() == lower for key, _ in headers)


def header_value(headers: Mapping[str, str] | None, name: str, default: str = "") -> str:
    """Return a response header value using case-insensitive key matching."""
    if not headers or not name:
        return default

    lower = name.lower()
    if lower in headers:
        value = headers[lower]
        return default if value is None else str(value).strip()

    for key, value in headers.items():
        if str(key).lower() == lower:
            return default if value is None else str(value).strip()
    return default


__all__ = ["build_request_headers", "cookie_header", "has_header", "header_value"]
