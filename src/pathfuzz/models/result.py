# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Fuzz result records and the shared collection workers append to."""

from __future__ import annotations

import asyncio
from collections.abc import Iterator, Mapping
from dataclasses import asdict, dataclass
from typing import Any

RESULT_FIELDS = ("url", "word", "status", "reflected", "error")

# Status code recorded when the request never produced an HTTP response.
TRANSPORT_FAILURE_STATUS = 0


@dataclass(frozen=True)
class FuzzResult:
    """One retained target outcome."""

    url: str
    word: str
    status: int
    reflected: bool = False
    error: str | None = None

    @property
    def transport_failed(self) -> bool:
        return self.status == TRANSPORT_FAILURE_STATUS

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> FuzzResult:
        """Build a record from an exported row; raises ValueError/KeyError on malformed input."""
        reflected = data.get("reflected", False)
        if isinstance(reflected, str):
            lowered = reflected.strip().lower()
            if lowered not in {"true", "false", ""}:
                raise ValueError(f"invalid reflected value {reflected!r}")
            reflected = lowered == "true"
        error = data.get("error")
        if error == "":
            error = None
        status = int(data["status"])
        if not 0 <= status <= 65535:
            raise ValueError(f"invalid status {status}")
        return cls(
            url=str(data["url"]),
            word=str(data.get("word") or ""),
            status=status,
            reflected=bool(reflected),
            error=None if error is None else str(error),
        )


class ResultCollection:
    """
    Append-only results shared by concurrent dispatcher workers.

    Appends are serialized through an asyncio lock. Iteration order is completion
    order, not request order.
    """

    def __init__(self) -> None:
        self._items: list[FuzzResult] = []
        self._lock = asyncio.Lock()

    async def append(self, result: FuzzResult) -> None:
        async with self._lock:
            self._items.append(result)

    def snapshot(self) -> list[FuzzResult]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[FuzzResult]:
        return iter(self.snapshot())


__all__ = ["RESULT_FIELDS", "TRANSPORT_FAILURE_STATUS", "FuzzResult", "ResultCollection"]
