"""Ingredient Parsing - Pure functions for recipe ingredient lines.

Turns free text like "1 1/2 cups chopped onions" into a structured
quantity/unit/name. Best effort: unparseable pieces fall back to defaults,
nothing raises.
"""

import math
import re

from .models import ParsedIngredient

DEFAULT_QUANTITY = 1.0
DEFAULT_UNIT = "item"

UNICODE_FRACTIONS: dict[str, str] = {
    "½": "0.5",
    "⅓": "0.33",
    "⅔": "0.67",
    "¼": "0.25",
    "¾": "0.75",
    "⅕": "0.2",
    "⅖": "0.4",
    "⅗": "0.6",
    "⅘": "0.8",
    "⅙": "0.17",
    "⅚": "0.83",
    "⅛": "0.125",
    "⅜": "0.375",
    "⅝": "0.625",
    "⅞": "0.875",
}

# Canonical unit -> textual variants. Order breaks ties between equal-length aliases.
UNIT_ALIASES: dict[str, tuple[str, ...]] = {
    "cup": ("cups", "c.", "c"),
    "tablespoon": ("tablespoons", "tbsp.", "tbsp", "tbs.", "tbs"),
    "teaspoon": ("teaspoons", "tsp.", "tsp", "t."),
    "ounce": ("ounces", "oz.", "oz"),
    "gram": ("grams", "g.", "g"),
    "pound": ("pounds", "lb.", "lb"),
    "kilogram": ("kilograms", "kg.", "kg"),
    "clove": ("cloves",),
    "pinch": ("pinches",),
    "dash": ("dashes",),
    "can": ("cans",),
    "package": ("packages", "pkg"),
    "slice": ("slices",),
    "whole": (),
}

# Preparation words dropped from the front of a name.
LEADING_DESCRIPTORS = ("of ", "chopped ", "diced ", "minced ", "sifted ", "melted ")

# Removed wherever they occur in the name.
DESCRIPTOR_SUFFIXES = (
    ", chopped",
    ", diced",
    ", minced",
    ", sifted",
    ", melted",
    " of",
    ", to taste",
    " to taste",
)

_NUMBER_RE = re.compile(r"^(?:\d+(?:\.\d+)?|\.\d+)$")
_FRACTION_RE = re.compile(r"^(\d+(?:\.\d+)?)/(\d+(?:\.\d+)?)$")


def _build_alias_index() -> list[tuple[str, str]]:
    """All (alias, canonical) pairs, longest alias first, table order within a length."""
    pairs = [
        (alias, canonical)
        for canonical, variants in UNIT_ALIASES.items()
        for alias in (canonical, *variants)
    ]
    # sorted() is stable, so table order survives among equal lengths
    return sorted(pairs, key=lambda pair: len(pair[0]), reverse=True)


_ALIAS_INDEX = _build_alias_index()


def replace_unicode_fractions(text: str) -> str:
    """Swap vulgar-fraction glyphs for their decimal strings."""
    for glyph, decimal in UNICODE_FRACTIONS.items():
        text = text.replace(glyph, decimal)
    return text


def parse_number(token: str) -> float | None:
    """Parse a plain number, decimal or "a/b" fraction.

    Returns:
        A positive finite value, or None when the token is not a usable quantity
    """
    value: float | None = None
    if _NUMBER_RE.match(token):
        value = float(token)
    else:
        match = _FRACTION_RE.match(token)
        if match:
            denominator = float(match.group(2))
            if denominator != 0:
                value = float(match.group(1)) / denominator

    if value is None or not math.isfinite(value) or value <= 0:
        return None
    return value


def _is_fraction_token(token: str) -> bool:
    """True for an "a/b" or decimal token; a bare integer is not a fraction."""
    if "/" not in token and "." not in token:
        return False
    return parse_number(token) is not None


def extract_quantity(text: str) -> tuple[float, str]:
    """Split a leading quantity off the text.

    Handles mixed numbers ("1 1/2", "2 0.5", "2 1.5"), single numbers and fractions.
    A second token only joins the first when it is written as a fraction or decimal.
    With no leading number, returns the default quantity and the text untouched.
    """
    tokens = text.split()
    if not tokens:
        return DEFAULT_QUANTITY, text

    first = parse_number(tokens[0])
    if first is None:
        return DEFAULT_QUANTITY, text

    plain_number = "/" not in tokens[0]
    if plain_number and len(tokens) > 1 and _is_fraction_token(tokens[1]):
        return first + parse_number(tokens[1]), " ".join(tokens[2:])

    return first, " ".join(tokens[1:])


def clean_ingredient_name(name: str) -> str:
    """Strip preparation descriptors from an ingredient name."""
    cleaned = name.strip()

    stripped = True
    while stripped:
        stripped = False
        for prefix in LEADING_DESCRIPTORS:
            if cleaned.startswith(prefix):
                cleaned = cleaned[len(prefix):].lstrip()
                stripped = True

    for suffix in DESCRIPTOR_SUFFIXES:
        cleaned = cleaned.replace(suffix, "")
    return cleaned.strip()


def extract_unit_and_name(text: str) -> tuple[str, str]:
    """Match a leading unit alias and return (canonical unit, cleaned name)."""
    for alias, canonical in _ALIAS_INDEX:
        pattern = f"{alias} "
        if text.startswith(pattern):
            return canonical, clean_ingredient_name(text[len(pattern):])
    return DEFAULT_UNIT, clean_ingredient_name(text)


def parse_ingredient(raw: str) -> ParsedIngredient:
    """Parse one free-text ingredient line.

    Args:
        raw: Ingredient line, e.g. "2 cloves garlic, minced"

    Returns:
        ParsedIngredient with quantity, canonical unit and cleaned name
    """
    text = replace_unicode_fractions(raw.lower())
    quantity, remaining = extract_quantity(text)
    unit, name = extract_unit_and_name(remaining.strip())

    return ParsedIngredient(
        quantity=quantity,
        unit=unit,
        name=name,
        original_string=raw,
    )


def parse_ingredients(lines: list[str]) -> list[ParsedIngredient]:
    """Parse every line, preserving order. Each line yields exactly one result."""
    return [parse_ingredient(line) for line in lines]
