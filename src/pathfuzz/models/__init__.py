# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Dataclass exports for pathfuzz."""

from ..http.models import HeaderList, HttpRequest, HttpResponse, RetryConfig
from .result import RESULT_FIELDS, TRANSPORT_FAILURE_STATUS, FuzzResult, ResultCollection

__all__ = [
    "RESULT_FIELDS",
    "TRANSPORT_FAILURE_STATUS",
    "FuzzResult",
    "HeaderList",
    "HttpRequest",
    "HttpResponse",
    "ResultCollection",
    "RetryConfig",
]
