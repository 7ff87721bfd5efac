# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Logging setup shared by the CLI and library callers."""

from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

# httpx logs every request at INFO; it is only let through at the highest verbosity.
NOISY_LOGGERS = ("httpx", "httpcore")


def resolve_log_level(level: str | None = None, verbose: int = 0) -> int:
    """Explicit level wins, then ``-v`` count, then ``PATHFUZZ_LOG_LEVEL`` (default WARNING)."""
    if level:
        return getattr(logging, level.upper(), logging.WARNING)
    if verbose >= 2:
        return logging.DEBUG
    if verbose == 1:
        return logging.INFO
    env_level = os.getenv("PATHFUZZ_LOG_LEVEL", "WARNING").upper()
    return getattr(logging, env_level, logging.WARNING)


def setup_logging(level: str | None = None, *, verbose: int = 0) -> int:
    """Configure root logging once; returns the effective level."""
    effective = resolve_log_level(level, verbose)
    logging.basicConfig(level=effective, format=LOG_FORMAT)
    logging.getLogger("pathfuzz").setLevel(effective)
    noisy_level = logging.DEBUG if verbose >= 3 else max(effective, logging.WARNING)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)
    return effective


__all__ = ["resolve_log_level", "setup_logging"]
