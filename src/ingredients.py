# ingredients.py
#
# Description:
# Helpers for working with ingredient lists: splitting a free-text line into
# amount and name, matching a step's ingredient mention to the top-level list,
# and filling in a step ingredient's missing amount from that match.

import logging
import re
from typing import List, Optional, Sequence

from models import Ingredient, IngredientSection, Recipe

logger = logging.getLogger(__name__)

_QUANTITY = r"(?:\d+\s+\d+/\d+|\d+/\d+|\d+(?:[.,]\d+)?)"
_UNIT_WORD = r"[a-zA-ZÀ-ſ%]+(?:\.[a-zA-ZÀ-ſ%]+)*"

# quantity, optional "- quantity" range, then up to three unit words, then the name
AMOUNT_PREFIX_PATTERN = re.compile(
    rf"^({_QUANTITY}(?:\s*-\s*{_QUANTITY})?(?:\s+{_UNIT_WORD}){{0,3}})\s+(.+)$",
    re.ASCII,
)

_PARENTHETICAL = re.compile(r"\([^)]*\)")
_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9À-ſ\s]", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")


def normalize_name(value: str) -> str:
    """
    Normalizes an ingredient name for comparison.

    Lowercases, drops parenthetical asides, replaces everything except
    letters (including Latin-1 and Latin Extended-A, for Swedish), digits and
    whitespace with spaces, then collapses whitespace.
    """
    value = _PARENTHETICAL.sub(" ", (value or "").lower())
    value = _NON_ALPHANUMERIC.sub(" ", value)
    return _WHITESPACE.sub(" ", value).strip()


def split_ingredient_amount_and_name(value: str) -> Ingredient:
    """
    Splits a line like "2 1/2 cups flour, sifted" into amount and name.

    The amount is the leading quantity (optionally a range) plus up to three
    unit words. Lines without a leading quantity become name-only. This is a
    heuristic: "2 large eggs beaten well" yields the amount "2 large eggs beaten".
    """
    trimmed = (value or "").strip()
    if not trimmed:
        return Ingredient()

    match = AMOUNT_PREFIX_PATTERN.match(trimmed)
    if not match:
        return Ingredient(name=trimmed)

    return Ingredient(amount=match.group(1).strip(), name=match.group(2).strip())


def find_matching_top_ingredient(name: str, top_ingredients: Sequence[Ingredient]) -> Optional[Ingredient]:
    """
    Finds the first top-level ingredient whose name overlaps the given one.

    Two names overlap when either normalized name contains the other. The
    first entry in list order wins, so with "cream" listed before "sour cream"
    a mention of "sour cream" resolves to "cream".
    """
    normalized = normalize_name(name)
    if not normalized:
        return None

    for ingredient in top_ingredients:
        top_name = normalize_name(ingredient.name)
        if not top_name:
            continue
        if normalized in top_name or top_name in normalized:
            return ingredient
    return None


def find_ingredient_index(name: str, top_ingredients: Sequence[Ingredient]) -> int:
    """Returns the position of the matching top-level ingredient, or -1."""
    match = find_matching_top_ingredient(name, top_ingredients)
    if match is None:
        return -1
    for index, ingredient in enumerate(top_ingredients):
        if ingredient is match:
            return index
    return -1


def names_overlap(first: str, second: str) -> bool:
    a, b = normalize_name(first), normalize_name(second)
    if not a or not b:
        return False
    return a in b or b in a


def resolve_step_ingredient(ingredient: Ingredient, top_ingredients: Sequence[Ingredient]) -> Ingredient:
    """
    Fills in a step ingredient's amount and unit from the top-level list.

    A step ingredient that already has an amount is returned as is (trimmed).
    Otherwise the matching top-level ingredient lends its amount and unit.
    Without a match the step ingredient keeps its own unit and stays without
    an amount.
    """
    name = ingredient.name.strip()
    if not name:
        return Ingredient()

    unit = (ingredient.unit or "").strip()
    if ingredient.amount.strip():
        return Ingredient(name=name, amount=ingredient.amount.strip(), unit=unit)

    match = find_matching_top_ingredient(name, top_ingredients)
    if match is None:
        logger.debug(f"No top-level ingredient matches step ingredient '{name}'.")
        return Ingredient(name=name, amount="", unit=unit)

    return Ingredient(name=name, amount=match.amount, unit=match.unit)


def coerce_ingredient(raw) -> Optional[Ingredient]:
    """
    Builds an Ingredient from a model, a dict or a legacy plain string.

    Dicts may name the ingredient under "name", "item" or "ingredient".
    Returns None for entries without a usable name.
    """
    if isinstance(raw, Ingredient):
        ingredient = raw
    elif isinstance(raw, str):
        ingredient = split_ingredient_amount_and_name(raw)
    elif isinstance(raw, dict):
        name = next((raw[key] for key in ("name", "item", "ingredient") if isinstance(raw.get(key), str)), "")
        amount = raw.get("amount")
        unit = raw.get("unit")
        ingredient = Ingredient(
            name=name.strip(),
            amount=amount.strip() if isinstance(amount, str) else "",
            unit=unit.strip() if isinstance(unit, str) else "",
        )
    else:
        return None
    return ingredient if ingredient.name.strip() else None


def _is_section(item) -> bool:
    return isinstance(item, IngredientSection) or (
        isinstance(item, dict) and isinstance(item.get("ingredients"), list)
    )


def _coerce_section(item) -> IngredientSection:
    if isinstance(item, IngredientSection):
        return item
    title = item.get("title")
    ingredients = [coerce_ingredient(raw) for raw in item["ingredients"]]
    return IngredientSection(
        title=title.strip() if isinstance(title, str) else "",
        ingredients=[ingredient for ingredient in ingredients if ingredient is not None],
    )


def get_ingredient_sections(source) -> List[IngredientSection]:
    """
    Returns the ingredient sections of a recipe or a raw ingredient list.

    Accepts a Recipe, a list of sections (models or dicts), or the legacy flat
    list of ingredients (models, dicts or plain strings), which is wrapped in
    one untitled section. Unusable entries are dropped.
    """
    items = source.ingredients if isinstance(source, Recipe) else source
    if not isinstance(items, (list, tuple)) or not items:
        return []
    if all(_is_section(item) for item in items):
        return [_coerce_section(item) for item in items]
    flat = [coerce_ingredient(item) for item in items if not _is_section(item)]
    return [IngredientSection(title="", ingredients=[ingredient for ingredient in flat if ingredient is not None])]


def get_flat_ingredients(source) -> List[Ingredient]:
    """All top-level ingredients across sections, in display order."""
    return [ingredient for section in get_ingredient_sections(source) for ingredient in section.ingredients]
