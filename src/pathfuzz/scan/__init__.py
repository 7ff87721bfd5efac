# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Target generation, response classification and fuzz dispatch."""

from .classifier import ERROR_PATTERNS, Classification, classify, has_error_signature, is_reflected
from .dispatcher import AdmissionGate, FuzzDispatcher, dispatch
from .openapi import discover_openapi, endpoints_from_document
from .targets import build_targets, load_wordlist, mutate_wordlist

__all__ = [
    "ERROR_PATTERNS",
    "AdmissionGate",
    "Classification",
    "FuzzDispatcher",
    "build_targets",
    "classify",
    "discover_openapi",
    "dispatch",
    "endpoints_from_document",
    "has_error_signature",
    "is_reflected",
    "load_wordlist",
    "mutate_wordlist",
]
