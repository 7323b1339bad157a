"""
Database models for FridgeCheck.

Import all models here so they are registered on Base.metadata.
"""

from fridgecheck.database import Base
from fridgecheck.models.pantry_item import PantryItem
from fridgecheck.models.recipe import Recipe
from fridgecheck.models.scan_record import ScanRecord, ScanImage
from fridgecheck.models.user_preferences import UserPreferences

__all__ = [
    "Base",
    "PantryItem",
    "Recipe",
    "ScanRecord",
    "ScanImage",
    "UserPreferences",
]
