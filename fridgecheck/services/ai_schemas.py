"""
Pydantic models for validating structured JSON responses from Claude.

Field aliases match the camelCase keys the prompts ask for. Category and
difficulty are closed enums; values outside the vocabulary are mapped to a
fallback here, since the model does not always respect the requested list.
"""

import enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class IngredientCategory(str, enum.Enum):
    """Fixed pantry category vocabulary."""

    PRODUCE = "Produce"
    DAIRY = "Dairy"
    MEAT = "Meat"
    SEAFOOD = "Seafood"
    GRAINS = "Grains"
    CONDIMENTS = "Condiments"
    BEVERAGES = "Beverages"
    SNACKS = "Snacks"
    FROZEN = "Frozen"
    OTHER = "Other"

    @classmethod
    def from_label(cls, value) -> "IngredientCategory":
        """Case-insensitive lookup, falling back to OTHER."""
        if isinstance(value, cls):
            return value
        label = str(value or "").strip().lower()
        for member in cls:
            if member.value.lower() == label:
                return member
        return cls.OTHER


class Difficulty(str, enum.Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"

    @classmethod
    def from_label(cls, value) -> "Difficulty":
        """Case-insensitive lookup, falling back to MEDIUM."""
        if isinstance(value, cls):
            return value
        label = str(value or "").strip().lower()
        for member in cls:
            if member.value.lower() == label:
                return member
        return cls.MEDIUM


# --- Ingredient Analysis ---


class IngredientSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    category: IngredientCategory = IngredientCategory.OTHER
    estimated_quantity: str = Field(default="", alias="estimatedQuantity")

    @field_validator("category", mode="before")
    @classmethod
    def _coerce_category(cls, value):
        return IngredientCategory.from_label(value)


class IngredientAnalysisSchema(BaseModel):
    ingredients: list[IngredientSchema]


# --- Recipe Generation ---


class RecipeSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str
    summary: str = ""
    ingredients: list[str] = []
    steps: list[str] = []
    prep_time: int = Field(default=0, ge=0, alias="prepTime")
    cook_time: int = Field(default=0, ge=0, alias="cookTime")
    nutritional_info: str = Field(default="", alias="nutritionalInfo")
    cuisine_type: str = Field(default="", alias="cuisineType")
    difficulty: Difficulty = Difficulty.MEDIUM

    @field_validator("difficulty", mode="before")
    @classmethod
    def _coerce_difficulty(cls, value):
        return Difficulty.from_label(value)


class RecipeSuggestionSchema(BaseModel):
    recipes: list[RecipeSchema]
