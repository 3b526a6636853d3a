# recipe_store.py
#
# Description:
# A small JSON-file key-value store holding the saved recipes and the user's
# language and measure-system preferences. Recipes are kept newest first and
# are only ever replaced as a whole, never edited field by field.

import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

import config
from migrations import migrate_stored_recipe
from models import Recipe
from utils import load_json, save_json

logger = logging.getLogger(__name__)


class RecipeNotFoundError(KeyError):
    """Raised when a recipe id is not in the store."""


class RecipeStore:
    """
    Persists recipes and preferences in one JSON file.

    The file is read once on construction (see load); every mutation writes
    the whole file back.
    """

    def __init__(self, path: str = config.STORE_JSON_PATH):
        self.path = path
        self._data: Dict[str, Any] = {}
        self._recipes: List[Recipe] = []
        self.load()

    def load(self) -> None:
        data = load_json(self.path)

        dropped = [key for key in config.LEGACY_STORE_KEYS if key in data]
        for key in dropped:
            del data[key]
        if dropped:
            logger.info(f"Removed legacy store keys: {', '.join(dropped)}")

        raw_recipes = data.get(config.STORE_KEY_RECIPES, [])
        if not isinstance(raw_recipes, list):
            logger.warning(f"Discarding stored recipes: expected a list, got {type(raw_recipes).__name__}.")
            raw_recipes = []

        recipes = []
        for raw in raw_recipes:
            if not isinstance(raw, dict):
                logger.warning("Skipping stored recipe that is not an object.")
                continue
            try:
                recipes.append(migrate_stored_recipe(raw))
            except ValidationError as e:
                logger.warning(f"Skipping stored recipe {raw.get('id', '?')}: {e}")

        self._data = data
        self._recipes = recipes
        if dropped:
            self._save()

    def _save(self) -> bool:
        self._data[config.STORE_KEY_RECIPES] = [recipe.to_json_dict() for recipe in self._recipes]
        return save_json(self._data, self.path)

    # --- Recipes ---

    def recipes(self) -> List[Recipe]:
        """All recipes, newest first."""
        return list(self._recipes)

    def get(self, recipe_id: str) -> Recipe:
        for recipe in self._recipes:
            if recipe.id == recipe_id:
                return recipe
        raise RecipeNotFoundError(recipe_id)

    def find(self, recipe_id: str) -> Optional[Recipe]:
        try:
            return self.get(recipe_id)
        except RecipeNotFoundError:
            return None

    def add(self, recipe: Recipe) -> None:
        self._recipes.insert(0, recipe)
        self._save()
        logger.info(f"Saved recipe '{recipe.title}' ({recipe.id}).")

    def delete(self, recipe_id: str) -> bool:
        remaining = [recipe for recipe in self._recipes if recipe.id != recipe_id]
        if len(remaining) == len(self._recipes):
            return False
        self._recipes = remaining
        self._save()
        logger.info(f"Deleted recipe {recipe_id}.")
        return True

    def replace(self, recipe: Recipe) -> None:
        """Swaps in a new version of a recipe (delete, then add as newest)."""
        if not self.delete(recipe.id):
            raise RecipeNotFoundError(recipe.id)
        self.add(recipe)

    # --- Preferences ---

    @property
    def language(self) -> str:
        return self._data.get(config.STORE_KEY_LANGUAGE) or config.DEFAULT_LANGUAGE

    @property
    def measure_system(self) -> str:
        return self._data.get(config.STORE_KEY_SYSTEM) or config.DEFAULT_MEASURE_SYSTEM

    @property
    def preferences_configured(self) -> bool:
        return bool(self._data.get(config.STORE_KEY_LANGUAGE) and self._data.get(config.STORE_KEY_SYSTEM))

    def save_preferences(self, language: str | None = None, measure_system: str | None = None) -> None:
        if language is not None:
            self._data[config.STORE_KEY_LANGUAGE] = language
        if measure_system is not None:
            self._data[config.STORE_KEY_SYSTEM] = measure_system
        self._save()
