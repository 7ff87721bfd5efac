# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import random

import pytest

from pathfuzz.errors import ConfigError
from pathfuzz.scan.targets import MUTATION_SPECIALS, build_targets, load_wordlist, mutate_wordlist


def test_load_wordlist_trims_and_skips_blank_lines(tmp_path):
    path = tmp_path / "words.txt"
    path.write_text("admin\n\n  login  \n\t\nbackup\r\n", encoding="utf-8")
    assert load_wordlist(str(path)) == ["admin", "login", "backup"]


def test_load_wordlist_missing_file_is_config_error(tmp_path):
    with pytest.raises(ConfigError, match="Failed to load wordlist"):
        load_wordlist(str(tmp_path / "missing.txt"))


def test_mutations_are_five_per_word_in_fixed_order():
    mutations = mutate_wordlist(["admin", "api"], random.Random(7))
    assert len(mutations) == 10
    assert mutations[0] == "ADMIN"
    assert mutations[1] == "nimda"
    assert mutations[2][:-1] == "admin"
    assert mutations[2][-1] in MUTATION_SPECIALS
    assert mutations[3:5] == ["%admin%", "admin1"]
    assert mutations[5:7] == ["API", "ipa"]


def test_mutations_are_reproducible_with_seeded_rng():
    assert mutate_wordlist(["a", "b", "c"], random.Random(42)) == mutate_wordlist(["a", "b", "c"], random.Random(42))
    assert mutate_wordlist([]) == []


def test_build_targets_joins_words_onto_base():
    targets = build_targets("http://example.test/", ["admin", "login"])
    assert targets == ["http://example.test/admin", "http://example.test/login"]


def test_build_targets_deduplicates_and_appends_discovered_sorted():
    targets = build_targets(
        "http://example.test",
        ["admin", " ", "admin", "docs"],
        {"http://example.test/zeta", "http://example.test/admin", "http://example.test/alpha"},
    )
    assert targets == [
        "http://example.test/admin",
        "http://example.test/docs",
        "http://example.test/alpha",
        "http://example.test/zeta",
    ]


def test_build_targets_without_words_uses_only_discoveries():
    assert build_targets("", [], ["http://example.test/b", "http://example.test/a"]) == [
        "http://example.test/a",
        "http://example.test/b",
    ]
