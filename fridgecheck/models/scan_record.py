from datetime import datetime, timezone

from sqlalchemy import Column, Integer, DateTime, ForeignKey, LargeBinary, JSON
from sqlalchemy.orm import relationship

from fridgecheck.database import Base


class ScanRecord(Base):
    """History entry for one completed scan."""
    __tablename__ = "scan_records"

    id = Column(Integer, primary_key=True)
    date = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    detected_ingredients = Column(JSON, nullable=False, default=list)  # ingredient names
    # Snapshot of every generated candidate, saved or not
    recipes = Column(JSON, nullable=False, default=list)

    images = relationship(
        "ScanImage",
        back_populates="scan_record",
        cascade="all, delete-orphan",
        order_by="ScanImage.position",
    )


class ScanImage(Base):
    """Processed JPEG that was sent to the model for a scan."""
    __tablename__ = "scan_images"

    id = Column(Integer, primary_key=True)
    scan_record_id = Column(Integer, ForeignKey("scan_records.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    image_data = Column(LargeBinary, nullable=False)

    scan_record = relationship("ScanRecord", back_populates="images")
