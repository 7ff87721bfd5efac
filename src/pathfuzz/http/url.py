# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""URL helpers shared by the crawler and the target generator."""

from __future__ import annotations

from urllib.parse import urljoin, urlsplit, urlunsplit

NON_NAVIGABLE_PREFIXES = ("#", "mailto:", "javascript:", "tel:", "data:")

STATIC_EXTENSIONS = (
    # images
    ".png", ".jpg", ".jpeg", ".gif", ".svg", ".ico", ".webp", ".bmp",
    # fonts
    ".woff", ".woff2", ".ttf", ".eot", ".otf",
    # stylesheets and scripts
    ".css", ".js",
    # archives and documents
    ".zip", ".tar", ".gz", ".tgz", ".rar", ".7z", ".pdf",
)


def normalize_url(url: str) -> str | None:
    """
    Return a canonical absolute http(s) URL, or None when ``url`` cannot be used.

    Scheme and host are lowercased, an empty path becomes ``/`` and the fragment is dropped.
    """
    try:
        parts = urlsplit(str(url or "").strip())
        hostname = parts.hostname
    except ValueError:
        return None
    scheme = parts.scheme.lower()
    if scheme not in {"http", "https"} or not hostname:
        return None
    return urlunsplit((scheme, parts.netloc.lower(), parts.path or "/", parts.query, ""))


def resolve_link(page_url: str, href: str) -> str | None:
    """Resolve ``href`` against the page it was found on."""
    try:
        joined = urljoin(page_url, href.strip())
    except ValueError:
        return None
    return normalize_url(joined)


def is_non_navigable(href: str) -> bool:
    return href.strip().lower().startswith(NON_NAVIGABLE_PREFIXES)


def same_site(a: str, b: str) -> bool:
    """Return True when both URLs share scheme and host (ports are not compared)."""
    pa = urlsplit(str(a or ""))
    pb = urlsplit(str(b or ""))
    return pa.scheme.lower() == pb.scheme.lower() and pa.hostname == pb.hostname


def has_static_extension(url: str) -> bool:
    path = urlsplit(url).path.lower()
    return path.endswith(STATIC_EXTENSIONS)


def join_target(base_url: str, word: str) -> str:
    return f"{base_url.rstrip('/')}/{word}"


def probed_token(target: str) -> str:
    """
    Return the token a target probes: the text after its final ``/``.

    Trailing slashes are ignored and a bare origin probes nothing.
    """
    parts = urlsplit(target)
    if parts.path in {"", "/"} and not parts.query:
        return ""
    return target.rstrip("/").rsplit("/", 1)[-1]


__all__ = [
    "NON_NAVIGABLE_PREFIXES",
    "STATIC_EXTENSIONS",
    "has_static_extension",
    "is_non_navigable",
    "join_target",
    "normalize_url",
    "probed_token",
    "resolve_link",
    "same_site",
]
