# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Result export and offline analysis."""

from .analyze import AnalysisSummary, format_summary, format_table, summarize
from .export import export_format, export_results, load_results

__all__ = [
    "AnalysisSummary",
    "export_format",
    "export_results",
    "format_summary",
    "format_table",
    "load_results",
    "summarize",
]
