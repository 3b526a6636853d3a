# scaler.py
#
# Description:
# This module scales the quantities inside formatted amount strings by a
# serving multiplier. Temperatures and durations are left alone, and amounts
# without any number ("to taste") come back unchanged.

import logging
import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from models import Ingredient, Recipe
from quantity_parser import QuantityToken, segments

import config

logger = logging.getLogger(__name__)


def format_quantity(quantity: float | int | None) -> str:
    """
    Format quantity to remove unnecessary decimals.

    Rounds to two decimals with halves going up, on the exact binary value.

    Examples:
        >>> format_quantity(2.0)
        '2'
        >>> format_quantity(1.50)
        '1.5'
        >>> format_quantity(2.125)
        '2.13'
    """
    if quantity is None:
        return ""
    if not math.isfinite(quantity):
        return str(quantity)

    if quantity == int(quantity):
        return str(int(quantity))

    rounded = Decimal(quantity).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{rounded:f}".rstrip('0').rstrip('.')


def scale_token(token: QuantityToken, multiplier: float) -> str:
    if not token.scalable:
        return token.text
    return format_quantity(token.value * multiplier)


def scale_amount_string(text: str, multiplier: float) -> str:
    """
    Multiplies every scalable number in the text by the multiplier.

    A multiplier of exactly 1 returns the text untouched. Numbers followed by
    a degree sign or a time word, and malformed fractions, are copied
    verbatim. Only token values change; the surrounding text and the number
    of tokens stay the same.
    """
    if multiplier == 1 or not text:
        return text
    if not math.isfinite(multiplier) or multiplier <= 0:
        logger.debug(f"Ignoring invalid scale multiplier {multiplier!r}.")
        return text

    parts = []
    for segment in segments(text):
        if isinstance(segment, QuantityToken):
            parts.append(scale_token(segment, multiplier))
        else:
            parts.append(segment.text)
    return "".join(parts)


def format_ingredient_line(ingredient: Ingredient, multiplier: float = 1, scale: bool = True) -> str:
    """Formats an ingredient for display as "amount unit name", scaling the amount."""
    amount = scale_amount_string(ingredient.amount, multiplier) if scale else ingredient.amount
    return " ".join(part for part in (amount, ingredient.unit, ingredient.name) if part).strip()


def scaling_baseline(recipe: Recipe) -> int:
    """
    The count the stored amounts correspond to.

    Baking recipes are scaled in batches of the authored recipe, so their
    baseline is always 1. Everything else scales from the serving count.
    """
    if recipe.recipe_type == "baking":
        return 1
    return max(1, recipe.base_servings_count)


def scale_multiplier(recipe: Recipe, current: Optional[float] = None) -> float:
    """Ratio of the chosen serving or batch count to the recipe's baseline."""
    baseline = scaling_baseline(recipe)
    if current is None:
        return 1
    return current / baseline


def adjust_multiplier(current: float, delta: float) -> float:
    """Steps the serving or batch count, refusing to go below the minimum."""
    adjusted = current + delta
    return adjusted if adjusted >= config.MIN_MULTIPLIER else current


def baseline_label(recipe: Recipe) -> str:
    return "batches" if recipe.recipe_type == "baking" else "portions"
