# migrations.py
#
# Description:
# Converts loosely shaped recipe JSON (LLM payloads and recipes saved by
# older versions) into validated Recipe models. Each legacy shape has its
# own migration step, and everything downstream only ever sees the
# current shape.
#
# Legacy shapes handled:
#   - "ingredients" as a flat list instead of titled sections
#   - ingredients as plain strings ("2 cups flour") or with an "item" key
#   - "instructions" as a list of plain strings
#   - step ingredients as plain strings, or without amount/unit
#   - missing measureSystem, recipeType or baseServingsCount

import logging
import time
from typing import Any, Dict, List, Optional, Sequence

from ingredients import (
    coerce_ingredient,
    find_matching_top_ingredient,
    get_flat_ingredients,
    get_ingredient_sections,
    resolve_step_ingredient,
    split_ingredient_amount_and_name,
)
from models import Ingredient, IngredientSection, Instruction, Recipe
from utils import generate_id

logger = logging.getLogger(__name__)


def normalize_step_ingredient(raw: Any, top_ingredients: Sequence[Ingredient]) -> Optional[Ingredient]:
    """
    Normalizes one entry of a step's ingredient list.

    Strings are split into amount and name, then resolved against the
    top-level list. Objects keep whatever amount and unit they carry and
    borrow each missing one from the matching top-level ingredient.
    Returns None for entries without a name.
    """
    if isinstance(raw, str):
        resolved = resolve_step_ingredient(split_ingredient_amount_and_name(raw), top_ingredients)
        return resolved if resolved.name else None

    ingredient = coerce_ingredient(raw)
    if ingredient is None:
        return None

    amount, unit = ingredient.amount, ingredient.unit
    if not amount or not unit:
        match = find_matching_top_ingredient(ingredient.name, top_ingredients)
        if match is not None:
            amount = amount or match.amount
            unit = unit or match.unit
    return Ingredient(name=ingredient.name, amount=amount, unit=unit)


def normalize_instruction(raw: Any, top_ingredients: Sequence[Ingredient]) -> Instruction:
    if isinstance(raw, str):
        return Instruction(text=raw, ingredients=[])
    if isinstance(raw, Instruction):
        raw = raw.model_dump()
    if not isinstance(raw, dict):
        return Instruction(text="", ingredients=[])

    raw_ingredients = raw.get("ingredients")
    if not isinstance(raw_ingredients, list):
        raw_ingredients = []
    ingredients = [normalize_step_ingredient(item, top_ingredients) for item in raw_ingredients]

    text = raw.get("text")
    return Instruction(
        text=text if isinstance(text, str) else "",
        ingredients=[ingredient for ingredient in ingredients if ingredient is not None],
    )


def normalize_instructions(raw: Any, top_ingredients: Sequence[Ingredient]) -> List[Instruction]:
    if not isinstance(raw, list):
        return []
    return [normalize_instruction(item, top_ingredients) for item in raw]


def _first(raw: Dict[str, Any], *keys: str) -> Any:
    """Reads the first present key; payloads may use camelCase or snake_case."""
    for key in keys:
        if raw.get(key) is not None:
            return raw[key]
    return None


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _base_servings(value: Any) -> int:
    try:
        count = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 1
    return count if count >= 1 else 1


def migrate_recipe_dict(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Rewrites a raw recipe dict into the current camelCase shape.

    Does not validate; the result is meant for Recipe.model_validate.
    """
    sections = get_ingredient_sections(_first(raw, "ingredients") or [])
    flat = get_flat_ingredients(sections)
    migrated: Dict[str, Any] = {
        "id": _as_text(raw.get("id")) or generate_id(),
        "title": _as_text(raw.get("title")) or "Untitled Recipe",
        "description": _as_text(raw.get("description")) or "",
        "ingredients": [section.model_dump() for section in sections],
        "instructions": [step.model_dump() for step in normalize_instructions(raw.get("instructions"), flat)],
        "baseServingsCount": _base_servings(_first(raw, "baseServingsCount", "base_servings_count")),
        "servings": _as_text(raw.get("servings")),
        "time": _as_text(raw.get("time")),
        "prepTime": _as_text(_first(raw, "prepTime", "prep_time")),
        "cookTime": _as_text(_first(raw, "cookTime", "cook_time")),
        "recipeType": _first(raw, "recipeType", "recipe_type") or "food",
        "measureSystem": _first(raw, "measureSystem", "measure_system") or "metric",
        "language": raw.get("language") or "en",
        "sourceUrl": _first(raw, "sourceUrl", "source_url") or "",
        "imageUrl": _as_text(_first(raw, "imageUrl", "image_url")),
        "createdAt": _first(raw, "createdAt", "created_at") or 0,
    }
    if migrated["recipeType"] not in ("food", "baking"):
        migrated["recipeType"] = "food"

    original_ingredients = _first(raw, "originalIngredients", "original_ingredients")
    original_sections: List[IngredientSection] = []
    if original_ingredients is not None:
        original_sections = get_ingredient_sections(original_ingredients)
        migrated["originalIngredients"] = [section.model_dump() for section in original_sections]

    original_instructions = _first(raw, "originalInstructions", "original_instructions")
    if original_instructions is not None:
        original_flat = get_flat_ingredients(original_sections) or flat
        migrated["originalInstructions"] = [
            step.model_dump() for step in normalize_instructions(original_instructions, original_flat)
        ]
    return migrated


def migrate_stored_recipe(raw: Dict[str, Any]) -> Recipe:
    """Loads a recipe saved by any earlier version. Raises ValidationError if unusable."""
    return Recipe.model_validate(migrate_recipe_dict(raw))


def recipe_from_payload(payload: Dict[str, Any], source_url: str, language: str, measure_system: str) -> Recipe:
    """
    Builds a new Recipe from an extraction payload.

    The source URL, language, measure system, creation time and a fresh id
    are stamped onto the payload, overriding anything the model returned.
    """
    stamped = dict(payload)
    stamped.pop("id", None)
    stamped.update({
        "sourceUrl": source_url,
        "language": language,
        "measureSystem": measure_system,
        "createdAt": int(time.time() * 1000),
    })
    recipe = migrate_stored_recipe(stamped)
    logger.debug(
        f"Built recipe '{recipe.title}' with {len(get_flat_ingredients(recipe))} ingredients "
        f"and {len(recipe.instructions)} steps."
    )
    return recipe
