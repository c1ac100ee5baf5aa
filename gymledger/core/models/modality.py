from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String

from gymledger.db.session import Base


class Modality(Base):
    """Type of class offered (Yoga, Pilates, ...)."""

    __tablename__ = "modalities"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
