from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, JSON

from fridgecheck.database import Base


class Recipe(Base):
    """A saved recipe. Created from a generated candidate when the user saves it."""
    __tablename__ = "recipes"

    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False)
    summary = Column(Text, nullable=False, default="")
    ingredients = Column(JSON, nullable=False, default=list)
    steps = Column(JSON, nullable=False, default=list)
    prep_time = Column(Integer, nullable=False, default=0)  # minutes
    cook_time = Column(Integer, nullable=False, default=0)  # minutes
    nutritional_info = Column(Text, nullable=False, default="")
    cuisine_type = Column(String(100), nullable=False, default="")
    difficulty = Column(String(20), nullable=False, default="Medium")
    source_ingredients = Column(JSON, nullable=False, default=list)
    is_favorite = Column(Boolean, nullable=False, default=False)
    date_created = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    @property
    def total_time(self) -> int:
        return (self.prep_time or 0) + (self.cook_time or 0)
