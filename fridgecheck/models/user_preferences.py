from sqlalchemy import Column, Integer, String, JSON

from fridgecheck.database import Base


class UserPreferences(Base):
    """Recipe constraints and API key stored by the settings screen."""
    __tablename__ = "user_preferences"

    id = Column(Integer, primary_key=True)
    dietary_restrictions = Column(JSON, nullable=False, default=list)
    allergies = Column(JSON, nullable=False, default=list)
    cuisine_preferences = Column(JSON, nullable=False, default=list)
    serving_size = Column(Integer, nullable=False, default=2)
    api_key = Column(String(255), nullable=False, default="")
