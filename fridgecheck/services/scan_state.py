"""
In-memory records and state variants for the scan pipeline.

Everything here is immutable. A selection toggle replaces the ingredient
record; a transition replaces the state object, so observers only ever see
complete states.
"""

from dataclasses import dataclass, field, replace
from typing import Optional, Union
from uuid import UUID, uuid4

from fridgecheck.config import settings
from fridgecheck.services.ai_schemas import (
    Difficulty,
    IngredientCategory,
    IngredientSchema,
    RecipeSchema,
)
from fridgecheck.services.exceptions import ScanError


@dataclass(frozen=True)
class DetectedIngredient:
    """One food item identified in the captured photos."""

    name: str
    category: IngredientCategory = IngredientCategory.OTHER
    estimated_quantity: str = ""
    is_selected: bool = True
    id: UUID = field(default_factory=uuid4)

    @classmethod
    def from_schema(cls, result: IngredientSchema) -> "DetectedIngredient":
        return cls(
            name=result.name,
            category=result.category,
            estimated_quantity=result.estimated_quantity,
        )

    def toggled(self) -> "DetectedIngredient":
        return replace(self, is_selected=not self.is_selected)


@dataclass(frozen=True)
class RecipeCandidate:
    """A generated recipe that has not been saved yet."""

    title: str
    summary: str
    ingredients: tuple[str, ...]
    steps: tuple[str, ...]
    prep_time_minutes: int
    cook_time_minutes: int
    nutrition_info: str
    cuisine_type: str
    difficulty: Difficulty
    source_ingredient_names: tuple[str, ...] = ()
    id: UUID = field(default_factory=uuid4)

    @property
    def total_time(self) -> int:
        return self.prep_time_minutes + self.cook_time_minutes

    @classmethod
    def from_schema(
        cls, result: RecipeSchema, source_ingredient_names=()
    ) -> "RecipeCandidate":
        return cls(
            title=result.title,
            summary=result.summary,
            ingredients=tuple(result.ingredients),
            steps=tuple(result.steps),
            prep_time_minutes=result.prep_time,
            cook_time_minutes=result.cook_time,
            nutrition_info=result.nutritional_info,
            cuisine_type=result.cuisine_type,
            difficulty=result.difficulty,
            source_ingredient_names=tuple(source_ingredient_names),
        )

    def to_dict(self) -> dict:
        """JSON-friendly snapshot, keyed like the recipe response contract."""
        return {
            "title": self.title,
            "summary": self.summary,
            "ingredients": list(self.ingredients),
            "steps": list(self.steps),
            "prepTime": self.prep_time_minutes,
            "cookTime": self.cook_time_minutes,
            "nutritionalInfo": self.nutrition_info,
            "cuisineType": self.cuisine_type,
            "difficulty": self.difficulty.value,
            "sourceIngredients": list(self.source_ingredient_names),
        }


@dataclass(frozen=True)
class RecipePreferences:
    """User constraints passed into recipe generation."""

    dietary_restrictions: tuple[str, ...] = ()
    allergies: tuple[str, ...] = ()
    cuisine_preferences: tuple[str, ...] = ()
    serving_size: int = field(default_factory=lambda: settings.default_serving_size)

    def __post_init__(self):
        if self.serving_size < 1:
            raise ValueError(f"serving_size must be positive, got {self.serving_size}")


# =============================================================================
# PIPELINE STATES
# =============================================================================


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Analyzing:
    pass


@dataclass(frozen=True)
class Analyzed:
    ingredients: tuple[DetectedIngredient, ...]


@dataclass(frozen=True)
class AnalysisFailed:
    error: ScanError


@dataclass(frozen=True)
class Generating:
    selected: tuple[DetectedIngredient, ...]


@dataclass(frozen=True)
class Generated:
    recipes: tuple[RecipeCandidate, ...]


@dataclass(frozen=True)
class GenerationFailed:
    error: ScanError


PipelineState = Union[
    Idle, Analyzing, Analyzed, AnalysisFailed, Generating, Generated, GenerationFailed
]

BUSY_STATES = (Analyzing, Generating)
FAILED_STATES = (AnalysisFailed, GenerationFailed)


def state_error(state: PipelineState) -> Optional[ScanError]:
    """Error carried by a failed state, else None."""
    if isinstance(state, FAILED_STATES):
        return state.error
    return None
