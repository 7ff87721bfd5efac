# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Stateless response classification: reflection and error signatures."""

from __future__ import annotations

from dataclasses import dataclass

from ..http.models import HttpResponse

ERROR_PATTERNS = (
    "internal server error",
    "exception",
    "traceback",
    "fatal",
    "stack trace",
    "syntax error",
    "sql error",
    "not allowed",
    "access denied",
    "unhandled",
)

ERROR_ANNOTATION = "Possible error detected"


def is_reflected(body: str, token: str) -> bool:
    """Case-sensitive substring check for the probed token."""
    return token in body


def has_error_signature(body: str) -> bool:
    """Case-insensitive substring match against ERROR_PATTERNS (no word boundaries)."""
    lowered = body.lower()
    return any(pattern in lowered for pattern in ERROR_PATTERNS)


@dataclass(frozen=True)
class Classification:
    status: int
    reflected: bool
    has_error: bool

    @property
    def error_annotation(self) -> str | None:
        return ERROR_ANNOTATION if self.has_error else None

    def markers(self) -> str:
        return (" [REFLECTED]" if self.reflected else "") + (" [ERROR]" if self.has_error else "")


def classify(response: HttpResponse, token: str) -> Classification | None:
    """Classify a response; None when the transport failed and there is nothing to inspect."""
    if response.transport_failed:
        return None
    body = response.text or ""
    return Classification(
        status=int(response.status_code),
        reflected=bool(token) and is_reflected(body, token),
        has_error=has_error_signature(body),
    )


__all__ = [
    "ERROR_ANNOTATION",
    "ERROR_PATTERNS",
    "Classification",
    "classify",
    "has_error_signature",
    "is_reflected",
]
