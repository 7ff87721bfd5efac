# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP request/response data models used across pathfuzz."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..config import HttpSettings

# Ordered header pairs; the same name may appear more than once.
HeaderList = list[tuple[str, str]]


@dataclass
class HttpRequest:
    """Normalized request representation consumed by HttpClient implementations."""

    url: str
    method: str = "GET"
    headers: HeaderList = field(default_factory=list)
    timeout: float | None = None
    # None defers to the client-level HttpSettings.allow_redirects.
    allow_redirects: bool | None = None


@dataclass
class HttpResponse:
    """Normalized HTTP response. ``status_code`` is None when the transport failed."""

    ok: bool
    status_code: int | None = None
    headers: dict[str, str] = field(default_factory=dict)
    text: str = ""
    url: str | None = None
    error_message: str | None = None
    error_type: str | None = None
    meta: dict[str, Any] = field(default_factory=dict)

    @property
    def transport_failed(self) -> bool:
        return self.status_code is None


@dataclass
class RetryConfig:
    """Retry policy for transport failures derived from HttpSettings."""

    max_attempts: int = 1
    backoff_factor: float = 2.0
    initial_delay: float = 0.5

    @classmethod
    def from_settings(cls, settings: HttpSettings) -> RetryConfig:
        """Build a retry config from the shared HttpSettings."""
        return cls(
            max_attempts=1 + max(0, settings.max_retries),
            backoff_factor=settings.backoff_factor,
            initial_delay=settings.initial_delay,
        )
