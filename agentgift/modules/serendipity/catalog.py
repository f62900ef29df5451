"""Static gift and affirmation tables keyed by mood and occasion."""

from __future__ import annotations

import re

from .schemas import Affirmation, GiftSuggestion


DEFAULT_KEY = "default"

AFFIRMATION_SETS: dict[str, list[Affirmation]] = {
    "overwhelmed-healing": [
        Affirmation(text="You're not too much. You're just finally feeling it all.", icon="💝"),
        Affirmation(text="Some gifts don't need wrapping, just timing.", icon="⏰"),
        Affirmation(text="Today is yours to reclaim.", icon="🌟"),
    ],
    "nostalgic-anniversary": [
        Affirmation(text="The past is a gift you give to your future self.", icon="🎁"),
        Affirmation(text="Memories are the only things that get better with time.", icon="✨"),
        Affirmation(text="You've built something beautiful worth celebrating.", icon="🏆"),
    ],
    "anxious-justbecause": [
        Affirmation(text="Your nervous system deserves kindness today.", icon="🤗"),
        Affirmation(text="Small comforts can carry you through big storms.", icon="☔"),
        Affirmation(text="You're allowed to need what you need.", icon="💚"),
    ],
    DEFAULT_KEY: [
        Affirmation(text="You deserve surprises that feel like coming home.", icon="🏠"),
        Affirmation(text="The best gifts find you when you're not looking.", icon="🔍"),
        Affirmation(text="Your intuition led you here for a reason.", icon="🧭"),
    ],
}

GIFT_TABLE: dict[str, GiftSuggestion] = {
    "overwhelmed-healing": GiftSuggestion(
        gift_name="Weighted Aromatherapy Hoodie",
        reasoning="Comfort that hugs like a friend, smells like calm.",
        emotional_benefit="Emotional regulation, sensory calm",
        gift_url="/products/weighted-aromatherapy-hoodie",
        price="$89.99",
        category="Self-Care",
        confidence=94,
    ),
    "nostalgic-anniversary": GiftSuggestion(
        gift_name="Memory Constellation Lamp",
        reasoning="Projects your shared moments into stars on the ceiling.",
        emotional_benefit="Connection to cherished memories",
        gift_url="/products/memory-constellation-lamp",
        price="$124.99",
        category="Sentimental",
        confidence=91,
    ),
    "anxious-justbecause": GiftSuggestion(
        gift_name="Worry Stone Garden Kit",
        reasoning="Smooth stones for nervous hands, tiny plants for hope.",
        emotional_benefit="Grounding, mindful distraction",
        gift_url="/products/worry-stone-garden",
        price="$34.99",
        category="Mindfulness",
        confidence=88,
    ),
    DEFAULT_KEY: GiftSuggestion(
        gift_name="Serendipity Box",
        reasoning="A curated surprise that matches your current energy.",
        emotional_benefit="Unexpected joy, self-discovery",
        gift_url="/products/serendipity-box",
        price="$49.99",
        category="Mystery",
        confidence=85,
    ),
}

_WHITESPACE = re.compile(r"\s+")


def mood_key(emotional_state: str, occasion_type: str) -> str:
    return f"{emotional_state.lower()}-{_WHITESPACE.sub('', occasion_type.lower())}"


def generate_affirmations(emotional_state: str, occasion_type: str) -> list[Affirmation]:
    key = mood_key(emotional_state, occasion_type)
    return list(AFFIRMATION_SETS.get(key, AFFIRMATION_SETS[DEFAULT_KEY]))


def generate_gift_suggestion(
    occasion_type: str,
    emotional_state: str,
    recent_life_event: str | None = None,
    gift_frequency: str | None = None,
    preferred_format: str | None = None,
) -> GiftSuggestion:
    # Only mood and occasion drive the lookup today; the rest is stored with the session.
    key = mood_key(emotional_state, occasion_type)
    return GIFT_TABLE.get(key, GIFT_TABLE[DEFAULT_KEY])
