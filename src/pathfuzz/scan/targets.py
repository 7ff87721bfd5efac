# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Target generation: wordlists, static mutations and discovered URLs."""

from __future__ import annotations

import random
from collections.abc import Iterable, Sequence

from ..errors import ConfigError
from ..http.url import join_target

MUTATION_SPECIALS = ("'", '"', "<", ">", ";", "|", "&")


def load_wordlist(path: str) -> list[str]:
    """Read one entry per line, trimming whitespace and dropping blank lines."""
    try:
        with open(path, encoding="utf-8", errors="replace") as handle:
            return [line.strip() for line in handle if line.strip()]
    except OSError as exc:
        raise ConfigError(f"Failed to load wordlist {path}: {exc}") from exc


def mutate_wordlist(words: Sequence[str], rng: random.Random | None = None) -> list[str]:
    """Five fixed mutations per word: upper, reversed, special suffix, %word%, word1."""
    rng = rng or random.Random()
    mutations: list[str] = []
    for word in words:
        mutations.append(word.upper())
        mutations.append(word[::-1])
        mutations.append(f"{word}{rng.choice(MUTATION_SPECIALS)}")
        mutations.append(f"%{word}%")
        mutations.append(f"{word}1")
    return mutations


def build_targets(base_url: str, words: Iterable[str], discovered: Iterable[str] = ()) -> list[str]:
    """
    Merge wordlist targets and discovered URLs into one ordered, duplicate-free list.

    Word targets come first in wordlist order, then discovered URLs sorted. Repeated
    words collapse to one target, so each URL is requested and reported once.
    """
    targets: dict[str, None] = {}
    for word in words:
        word = word.strip()
        if not word:
            continue
        targets.setdefault(join_target(base_url, word), None)
    for url in sorted(discovered):
        targets.setdefault(url, None)
    return list(targets)


__all__ = ["MUTATION_SPECIALS", "build_targets", "load_wordlist", "mutate_wordlist"]
