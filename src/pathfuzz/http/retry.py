# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Retry helper for HttpClient implementations."""

from __future__ import annotations

import asyncio

from ..config import load_http_settings
from .client import HttpClient
from .models import HttpRequest, HttpResponse, RetryConfig


def build_default_retry_config() -> RetryConfig:
    """Create a RetryConfig from environment-backed HttpSettings."""
    return RetryConfig.from_settings(load_http_settings())


async def send_with_retries(
    client: HttpClient,
    request: HttpRequest,
    *,
    retry_config: RetryConfig | None = None,
) -> HttpResponse:
    """Execute a request, retrying transport failures with exponential backoff."""
    cfg = retry_config or build_default_retry_config()
    max_attempts = max(1, cfg.max_attempts)

    attempt = 0
    delay = cfg.initial_delay
    response = HttpResponse(ok=False)
    while attempt < max_attempts:
        try:
            response = await client.request(request)
        except Exception as exc:  # noqa: BLE001
            response = HttpResponse(
                ok=False,
                url=request.url,
                error_message=str(exc) or exc.__class__.__name__,
                error_type=exc.__class__.__name__,
            )

        # Only transport-level failures (no status code) are retried.
        if not response.transport_failed:
            if attempt:
                response.meta["retry_count"] = attempt
            return response

        attempt += 1
        if attempt >= max_attempts:
            break
        await asyncio.sleep(delay)
        delay *= cfg.backoff_factor

    response.meta.setdefault("retry_count", attempt - 1)
    if max_attempts > 1:
        response.meta.setdefault("retry_exhausted", True)
    return response


__all__ = ["build_default_retry_config", "send_with_retries"]
