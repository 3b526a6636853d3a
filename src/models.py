# models.py
#
# Description:
# This module defines the Pydantic data models used throughout the application.
# Field names are snake_case in Python and camelCase on the wire, so stored
# recipes and LLM payloads share one JSON shape.

from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Language = Literal["en", "sv"]
MeasureSystem = Literal["metric", "imperial"]
RecipeType = Literal["food", "baking"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class Ingredient(CamelModel):
    """Represents a single ingredient with a free-text amount and a unit."""
    name: str = Field("", description="The name of the ingredient, e.g., 'flour' or 'mjöl'.")
    amount: str = Field("", description="The quantity as written, e.g., '2 1/2', '1-2', 'to taste'.")
    unit: str = Field("", description="The unit of measurement, e.g., 'cups', 'dl', 'tbsp'.")


class IngredientSection(CamelModel):
    """Represents a group of ingredients, e.g., 'For the sauce'."""
    title: str = Field("", description="The section title, empty for an untitled section.")
    ingredients: List[Ingredient] = Field(default_factory=list)


class Instruction(CamelModel):
    """A cooking step and the ingredients it uses."""
    text: str = Field("", description="The step text.")
    ingredients: List[Ingredient] = Field(
        default_factory=list,
        description="Ingredients used in this step, referencing the top-level list.",
    )


class Recipe(CamelModel):
    """The main model representing a complete, stored recipe."""
    id: str
    title: str = Field("Untitled Recipe", description="A short, descriptive title for the dish.")
    description: str = ""
    ingredients: List[IngredientSection] = Field(default_factory=list)
    instructions: List[Instruction] = Field(default_factory=list)
    original_ingredients: Optional[List[IngredientSection]] = None
    original_instructions: Optional[List[Instruction]] = None
    base_servings_count: int = Field(1, ge=1, description="The serving count the stored amounts reflect.")
    servings: Optional[str] = Field(None, description="The original yield as written, e.g., '4 portions'.")
    time: Optional[str] = Field(None, description="Total time as an ISO 8601 duration, e.g., 'PT1H30M'.")
    prep_time: Optional[str] = None
    cook_time: Optional[str] = None
    recipe_type: RecipeType = "food"
    measure_system: MeasureSystem = "metric"
    language: Language = "en"
    source_url: str = ""
    image_url: Optional[str] = None
    created_at: int = Field(0, description="Creation time in milliseconds since the epoch.")


class IngredientExplanation(CamelModel):
    """A short description of an ingredient and some substitutes."""
    description: str
    substitutes: List[str] = Field(default_factory=list)


class ExtractionErrorCode(str, Enum):
    PAGE_NOT_SUPPORTED = "PAGE_NOT_SUPPORTED"
    EXTRACTION_FAILED = "EXTRACTION_FAILED"


class ExtractionResult(BaseModel):
    """Outcome of one extraction call: either a recipe or an error code."""
    recipe: Optional[Recipe] = None
    error_code: Optional[ExtractionErrorCode] = None
    processing_time: Optional[float] = None

    @property
    def ok(self) -> bool:
        return self.recipe is not None

    @classmethod
    def failure(cls, error_code: ExtractionErrorCode) -> "ExtractionResult":
        return cls(recipe=None, error_code=error_code)
