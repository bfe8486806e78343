from __future__ import annotations

import random

PREFIXES = (
    "Thunder", "Lightning", "Storm", "Wind", "Fire", "Shadow", "Golden", "Silver",
    "Crimson", "Azure", "Jade", "Ruby", "Wild", "Noble", "Brave", "Swift",
    "Royal", "Dancing", "Flying", "Secret", "Mystic", "Bold", "Silent", "Rising",
)
SUFFIXES = (
    "Strike", "Bolt", "Dash", "Arrow", "Blade", "Wing", "Heart", "Runner",
    "Racer", "Legend", "Spirit", "Dream", "Glory", "Knight", "Prince", "Queen",
    "Star", "Moon", "Dawn", "Victory", "Honor", "Pride", "Fame", "Power",
)
DESCRIPTORS = (
    "Elegant", "Graceful", "Radiant", "Mighty", "Fearless", "Fleet",
    "Regal", "Majestic", "Lucky", "Blessed", "Magic", "Speedy",
)
SINGLE_WORDS = (
    "Eclipse", "Pharaoh", "Justify", "Citation", "Whirlaway", "Phoenix",
    "Hurricane", "Tornado", "Cyclone", "Tempest", "Avalanche", "Meteor",
)
COLORS = ("Scarlet", "Amber", "Emerald", "Indigo", "Ebony", "Ivory", "Onyx", "Pearl")
RACING_TERMS = ("Furlong", "Derby", "Stakes", "Classic", "Trophy", "Stretch", "Finish", "Pace")


class NameGenerator:
    """Racehorse-style name suggestions for the name entry screen."""

    def __init__(self, *, seed: int | None = None, max_length: int = 18) -> None:
        self._rng = random.Random(seed)
        self.max_length = max_length

    def generate_name(self) -> str:
        pattern = self._rng.choice(("prefix_suffix", "descriptor_noun", "single", "color_term"))
        if pattern == "prefix_suffix":
            return f"{self._rng.choice(PREFIXES)} {self._rng.choice(SUFFIXES)}"
        if pattern == "descriptor_noun":
            return f"{self._rng.choice(DESCRIPTORS)} {self._rng.choice(SUFFIXES)}"
        if pattern == "color_term":
            return f"{self._rng.choice(COLORS)} {self._rng.choice(RACING_TERMS)}"
        return self._rng.choice(SINGLE_WORDS)

    def generate_options(self, count: int = 6) -> list[str]:
        """Distinct names that fit the name field; at most `count`."""

        options: list[str] = []
        # Plenty of room: the word lists allow hundreds of combinations.
        for _ in range(count * 20):
            if len(options) >= count:
                break
            name = self.generate_name()
            if len(name) <= self.max_length and name not in options:
                options.append(name)
        return options
