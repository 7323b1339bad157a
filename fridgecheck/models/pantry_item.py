from datetime import datetime, timedelta, timezone

from sqlalchemy import Column, Integer, String, DateTime

from fridgecheck.database import Base

EXPIRING_SOON_DAYS = 3


class PantryItem(Base):
    """Food item the user has at home."""
    __tablename__ = "pantry_items"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    category = Column(String(50), nullable=False, default="Other")
    quantity = Column(String(255), nullable=False, default="")  # Free text, e.g. "1 carton"
    date_added = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    expiry_date = Column(DateTime(timezone=True), nullable=True)

    def _expiry_utc(self):
        # SQLite drops tzinfo on the way back out
        if self.expiry_date is None:
            return None
        if self.expiry_date.tzinfo is None:
            return self.expiry_date.replace(tzinfo=timezone.utc)
        return self.expiry_date

    @property
    def is_expired(self) -> bool:
        expiry = self._expiry_utc()
        if expiry is None:
            return False
        return expiry < datetime.now(timezone.utc)

    @property
    def is_expiring_soon(self) -> bool:
        expiry = self._expiry_utc()
        if expiry is None:
            return False
        soon = datetime.now(timezone.utc) + timedelta(days=EXPIRING_SOON_DAYS)
        return expiry <= soon and not self.is_expired
