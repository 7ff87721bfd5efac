# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""In-process HttpClient implementations."""

from __future__ import annotations

from .client import HttpClient
from .models import HttpRequest, HttpResponse


class StubHttpClient(HttpClient):
    """Deterministic, programmable HttpClient for tests and offline runs."""

    def __init__(self, responses: dict[str, HttpResponse] | None = None, *, default: HttpResponse | None = None):
        self._responses = responses or {}
        self._default = default
        self.requests: list[HttpRequest] = []

    def add(self, url: str, response: HttpResponse) -> None:
        self._responses[url] = response

    def add_page(self, url: str, body: str, *, status_code: int = 200, content_type: str = "text/html") -> None:
        self.add(url, HttpResponse(ok=True, status_code=status_code, headers={"content-type": content_type}, text=body, url=url))

    async def request(self, request: HttpRequest) -> HttpResponse:
        self.requests.append(request)
        if request.url in self._responses:
            return self._responses[request.url]
        if self._default is not None:
            return self._default
        return HttpResponse(ok=False, status_code=None, url=request.url, error_message="No stubbed response configured")

    async def aclose(self) -> None:
        return None
