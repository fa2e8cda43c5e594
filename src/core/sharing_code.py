"""Sharing code generator: ADJECTIVE-NOUN-NUMBER, uppercased.

Purely cosmetic. Collisions are not checked; two households that draw
the same code share one data partition.
"""

from __future__ import annotations

import random

ADJECTIVES = (
    "Happy", "Bright", "Swift", "Brave", "Golden", "Clever", "Kind", "Magic",
    "Silent", "Noble", "Grand", "Lucky", "Sunny", "Calm", "Wild", "Cool",
    "Prime", "Epic", "Teal", "Cyan", "Silver", "Bronze", "Neon", "Rapid",
    "Cosmic", "Lunar", "Solar", "Mystic", "Royal", "Mighty", "Stormy",
    "Ancient", "Retro", "Pixel", "Smart", "Wise", "Bold", "Fresh", "Quick",
    "Gentle", "Jolly", "Lively", "Proud", "Witty", "Zesty", "Alpine",
    "Arctic", "Coastal", "Vivid", "Keen",
)

NOUNS = (
    "Panda", "Eagle", "Falcon", "Tiger", "Otter", "Badger", "Dolphin", "Wolf",
    "Lion", "Bear", "Fox", "Whale", "Hawk", "Owl", "Comet", "Rocket", "Robot",
    "Ninja", "Pirate", "Knight", "Wizard", "Dragon", "Titan", "Giant", "Ghost",
    "River", "Lake", "Ocean", "Creek", "Forest", "Meadow", "Atlas", "Beacon",
    "Canvas", "Delta", "Echo", "Fable", "Haven", "Jewel", "Legend", "Nexus",
    "Orbit", "Pulse", "Quest", "Radar", "Signal", "Vault", "Wave", "Zenith",
)


def generate_sharing_code(rng: random.Random | None = None) -> str:
    """Return a fresh code such as "SWIFT-OTTER-4821"."""
    rng = rng or random.Random()
    adjective = rng.choice(ADJECTIVES)
    noun = rng.choice(NOUNS)
    number = rng.randint(1000, 9999)
    return f"{adjective}-{noun}-{number}".upper()


def normalize_sharing_code(raw: str) -> str:
    """Canonical form of a user-entered code (trimmed, uppercased)."""
    return raw.strip().upper()
