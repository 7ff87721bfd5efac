# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpx-backed HttpClient implementation."""

from __future__ import annotations

import httpx

from ..config import HttpSettings, load_http_settings
from ..errors import categorize_exception
from .client import HttpClient
from .headers import has_header
from .models import HttpRequest, HttpResponse


class HttpxClient(HttpClient):
    """Asynchronous httpx client wrapper; one instance is shared by every worker."""

    def __init__(
        self,
        settings: HttpSettings | None = None,
        client: httpx.AsyncClient | None = None,
        *,
        proxy: str | None = None,
    ):
        self.settings = settings or load_http_settings()
        self._client = client or httpx.AsyncClient(
            follow_redirects=self.settings.allow_redirects,
            timeout=self.settings.timeout,
            verify=self.settings.verify_ssl,
            proxy=proxy,
        )

    async def request(self, request: HttpRequest) -> HttpResponse:
        headers = list(request.headers)
        if not has_header(headers, "User-Agent"):
            headers.insert(0, ("User-Agent", self.settings.user_agent))

        timeout = request.timeout if request.timeout is not None else self.settings.timeout
        follow_redirects = self.settings.allow_redirects if request.allow_redirects is None else request.allow_redirects
        max_body_bytes = self.settings.max_body_bytes
        if max_body_bytes <= 0:
            max_body_bytes = 16 * 1024 * 1024

        try:
            async with self._client.stream(
                request.method,
                request.url,
                headers=headers,
                timeout=timeout,
                follow_redirects=follow_redirects,
            ) as resp:
                content = bytearray()
                truncated = False
                async for chunk in resp.aiter_bytes():
                    if not chunk:
                        continue
                    remaining = max_body_bytes - len(content)
                    if len(chunk) >= remaining:
                        content.extend(chunk[:remaining])
                        truncated = len(chunk) > remaining
                        if truncated:
                            break
                        continue
                    content.extend(chunk)

                encoding = resp.encoding or "utf-8"
                try:
                    text = bytes(content).decode(encoding, errors="replace")
                except LookupError:
                    text = bytes(content).decode("utf-8", errors="replace")

            return HttpResponse(
                ok=True,
                status_code=resp.status_code,
                headers={key.lower(): value for key, value in resp.headers.items()},
                text=text,
                url=str(resp.url),
                meta={
                    "body_truncated": truncated,
                    "body_bytes_read": len(content),
                },
            )
        except Exception as exc:  # noqa: BLE001
            return HttpResponse(
                ok=False,
                url=request.url,
                error_message=str(exc) or type(exc).__name__,
                error_type=type(exc).__name__,
                meta={"error_category": categorize_exception(exc).value},
            )

    async def aclose(self) -> None:
        await self._client.aclose()
