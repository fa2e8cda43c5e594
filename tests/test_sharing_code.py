"""Tests for src.core.sharing_code."""

import random
import re

from src.core.sharing_code import (
    ADJECTIVES,
    NOUNS,
    generate_sharing_code,
    normalize_sharing_code,
)


def test_format():
    code = generate_sharing_code()
    assert re.fullmatch(r"[A-Z]+-[A-Z]+-\d{4}", code)


def test_parts_come_from_wordlists():
    adjective, noun, number = generate_sharing_code().split("-")
    assert adjective in {a.upper() for a in ADJECTIVES}
    assert noun in {n.upper() for n in NOUNS}
    assert 1000 <= int(number) <= 9999


def test_seeded_rng_is_reproducible():
    assert generate_sharing_code(random.Random(7)) == generate_sharing_code(random.Random(7))


def test_normalize():
    assert normalize_sharing_code("  swift-otter-4821 ") == "SWIFT-OTTER-4821"
    assert normalize_sharing_code("   ") == ""
