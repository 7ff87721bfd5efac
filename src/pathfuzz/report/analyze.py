# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Aggregate summaries of exported fuzz results."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from ..models.result import FuzzResult

TABLE_LIMIT = 20
URL_WIDTH = 45
WORD_WIDTH = 8


@dataclass(frozen=True)
class AnalysisSummary:
    total: int = 0
    status_2xx: int = 0
    status_3xx: int = 0
    status_4xx: int = 0
    status_5xx: int = 0
    reflected: int = 0
    errors: int = 0


def summarize(results: Iterable[FuzzResult]) -> AnalysisSummary:
    counts = {"total": 0, "status_2xx": 0, "status_3xx": 0, "status_4xx": 0, "status_5xx": 0, "reflected": 0, "errors": 0}
    for result in results:
        counts["total"] += 1
        bucket = result.status // 100
        if 2 <= bucket <= 5:
            counts[f"status_{bucket}xx"] += 1
        if result.reflected:
            counts["reflected"] += 1
        if result.error:
            counts["errors"] += 1
    return AnalysisSummary(**counts)


def format_summary(summary: AnalysisSummary) -> str:
    return "\n".join(
        [
            f":: Total results    : {summary.total}",
            f":: 2xx              : {summary.status_2xx}",
            f":: 3xx              : {summary.status_3xx}",
            f":: 4xx              : {summary.status_4xx}",
            f":: 5xx              : {summary.status_5xx}",
            f":: Reflected        : {summary.reflected}",
            f":: Errors           : {summary.errors}",
        ]
    )


def format_table(results: Sequence[FuzzResult], limit: int = TABLE_LIMIT) -> str:
    """Fixed-width table of the first ``limit`` records."""
    lines = [
        f"{'URL':<{URL_WIDTH}} {'WORD':<{WORD_WIDTH}} {'STATUS':>6} {'REFL':<5} ERROR",
        "-" * (URL_WIDTH + WORD_WIDTH + 26),
    ]
    for result in results[:limit]:
        lines.append(
            f"{result.url[:URL_WIDTH]:<{URL_WIDTH}} "
            f"{result.word[:WORD_WIDTH]:<{WORD_WIDTH}} "
            f"{result.status:>6} "
            f"{'yes' if result.reflected else 'no':<5} "
            f"{result.error or '-'}"
        )
    return "\n".join(lines)


__all__ = ["AnalysisSummary", "format_summary", "format_table", "summarize"]
