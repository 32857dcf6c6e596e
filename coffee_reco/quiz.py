"""Fixed lookups that translate quiz answers into catalogue terms."""

from __future__ import annotations

from collections.abc import Iterable

from coffee_reco.models import QuizResults, RoastLevel

# Quiz roast answer -> roast levels it covers
QUIZ_ROAST_LEVELS: dict[str, list[str]] = {
    "light": [RoastLevel.LIGHT.value, RoastLevel.MEDIUM_LIGHT.value],
    "medium": [
        RoastLevel.MEDIUM_LIGHT.value,
        RoastLevel.MEDIUM.value,
        RoastLevel.MEDIUM_DARK.value,
    ],
    "dark": [RoastLevel.MEDIUM_DARK.value, RoastLevel.DARK.value],
}

# Quiz flavor category -> substrings looked for in flavor-note names
QUIZ_FLAVOR_KEYWORDS: dict[str, list[str]] = {
    "sweet": ["sweet", "sugar", "honey", "caramel", "chocolate", "toffee", "candy"],
    "fruity": ["fruit", "berry", "citrus", "apple", "cherry", "orange", "lemon", "tropical"],
    "nutty": ["nut", "almond", "hazelnut", "peanut", "walnut"],
    "earthy": ["earth", "woody", "forest", "tobacco", "leather", "spice"],
    "floral": ["floral", "jasmine", "rose", "lavender", "herb"],
    "acidic": ["bright", "acidic", "tangy", "sour", "tart"],
}


def roast_levels_for_quiz(preferred_roast: str | None) -> list[str]:
    """Return the roast levels matching a quiz roast answer.

    Matching is case-insensitive. Unknown or missing answers map to an
    empty list rather than raising.
    """
    if not preferred_roast:
        return []
    return list(QUIZ_ROAST_LEVELS.get(preferred_roast.lower(), []))


def count_quiz_flavor_matches(
    preferred_flavors: Iterable[str], flavor_note_names: Iterable[str]
) -> int:
    """Count quiz flavor categories that hit at least one flavor-note name.

    A category hits when any of its keywords is a case-insensitive
    substring of any name. Each category counts at most once; unknown
    categories never match.

    Args:
        preferred_flavors: Quiz categories, e.g. ``["fruity", "nutty"]``.
        flavor_note_names: Names of the flavor notes tasted in a coffee.

    Returns:
        Number of matching categories.
    """
    names = [name.lower() for name in flavor_note_names]
    matches = 0
    for category in preferred_flavors:
        keywords = QUIZ_FLAVOR_KEYWORDS.get(category.lower(), [])
        if any(keyword in name for name in names for keyword in keywords):
            matches += 1
    return matches


def validate_quiz(quiz: QuizResults) -> None:
    """Check that quiz answers have the right shape.

    Only types are checked. Roast answers and flavor categories outside
    :data:`QUIZ_ROAST_LEVELS` and :data:`QUIZ_FLAVOR_KEYWORDS` are kept;
    they simply never match anything when scoring.

    Raises:
        ValueError: If the roast answer is not a string or any flavor
            category is not a string.
    """
    if quiz.preferred_roast is not None and not isinstance(quiz.preferred_roast, str):
        raise ValueError(f"preferredRoast must be a string, got {quiz.preferred_roast!r}")
    bad = [f for f in quiz.preferred_flavors if not isinstance(f, str)]
    if bad:
        raise ValueError(f"preferredFlavors must be strings, got {bad!r}")
