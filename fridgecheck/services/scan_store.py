"""
Storage boundary for scan pipeline output.

The pipeline only ever inserts through a ScanStore and reads preferences and
pantry contents from it. SQLAlchemyScanStore is the on-disk implementation;
any other backend can subclass ScanStore.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from sqlalchemy.orm import Session

from fridgecheck.config import settings
from fridgecheck.models import PantryItem, Recipe, ScanImage, ScanRecord, UserPreferences
from fridgecheck.services.scan_state import (
    DetectedIngredient,
    RecipeCandidate,
    RecipePreferences,
)

logger = logging.getLogger(__name__)


class ScanStore(ABC):
    """Abstract store consumed by ScanPipeline commit operations."""

    @abstractmethod
    def add_pantry_item(self, ingredient: DetectedIngredient) -> None:
        """Insert one pantry record for a detected ingredient."""
        pass

    @abstractmethod
    def add_recipe(self, candidate: RecipeCandidate) -> None:
        """Insert one saved recipe for a generated candidate."""
        pass

    @abstractmethod
    def add_scan_record(
        self,
        images: Sequence[bytes],
        ingredient_names: Sequence[str],
        recipes: Sequence[RecipeCandidate],
    ) -> None:
        """Insert one scan history record."""
        pass

    @abstractmethod
    def get_preferences(self) -> Optional[RecipePreferences]:
        """Stored recipe constraints, or None if the user never set any."""
        pass

    @abstractmethod
    def list_pantry_item_names(self) -> list[str]:
        """Names of everything currently in the pantry."""
        pass


class SQLAlchemyScanStore(ScanStore):
    """ScanStore backed by a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def add_pantry_item(self, ingredient: DetectedIngredient) -> PantryItem:
        item = PantryItem(
            name=ingredient.name,
            category=ingredient.category.value,
            quantity=ingredient.estimated_quantity,
        )
        self.db.add(item)
        self.db.commit()
        self.db.refresh(item)
        return item

    def add_recipe(self, candidate: RecipeCandidate) -> Recipe:
        recipe = Recipe(
            title=candidate.title,
            summary=candidate.summary,
            ingredients=list(candidate.ingredients),
            steps=list(candidate.steps),
            prep_time=candidate.prep_time_minutes,
            cook_time=candidate.cook_time_minutes,
            nutritional_info=candidate.nutrition_info,
            cuisine_type=candidate.cuisine_type,
            difficulty=candidate.difficulty.value,
            source_ingredients=list(candidate.source_ingredient_names),
        )
        self.db.add(recipe)
        self.db.commit()
        self.db.refresh(recipe)
        logger.info("Saved recipe %r (id=%d)", recipe.title, recipe.id)
        return recipe

    def add_scan_record(
        self,
        images: Sequence[bytes],
        ingredient_names: Sequence[str],
        recipes: Sequence[RecipeCandidate],
    ) -> ScanRecord:
        record = ScanRecord(
            detected_ingredients=list(ingredient_names),
            recipes=[candidate.to_dict() for candidate in recipes],
        )
        record.images = [
            ScanImage(position=position, image_data=data)
            for position, data in enumerate(images)
        ]
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)
        logger.info(
            "Saved scan record %d (%d images, %d ingredients, %d recipes)",
            record.id,
            len(images),
            len(ingredient_names),
            len(recipes),
        )
        return record

    def get_preferences(self) -> Optional[RecipePreferences]:
        prefs = self.db.query(UserPreferences).order_by(UserPreferences.id).first()
        if prefs is None:
            return None

        serving_size = prefs.serving_size
        if serving_size is None or serving_size < 1:
            logger.warning(
                "Stored serving size %r is not positive, using %d",
                serving_size,
                settings.default_serving_size,
            )
            serving_size = settings.default_serving_size

        return RecipePreferences(
            dietary_restrictions=tuple(prefs.dietary_restrictions or ()),
            allergies=tuple(prefs.allergies or ()),
            cuisine_preferences=tuple(prefs.cuisine_preferences or ()),
            serving_size=serving_size,
        )

    def get_api_key(self) -> str:
        """API key saved on the settings screen, or "" if none."""
        prefs = self.db.query(UserPreferences).order_by(UserPreferences.id).first()
        return prefs.api_key if prefs else ""

    def list_pantry_item_names(self) -> list[str]:
        rows = self.db.query(PantryItem.name).order_by(PantryItem.id).all()
        return [name for (name,) in rows]
