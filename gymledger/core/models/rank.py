"""Merit rank ("patente"), e.g. Major, Capitão. Multiplier is paid per attending student."""

from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, Numeric, String

from gymledger.db.session import Base


class Rank(Base):
    __tablename__ = "ranks"
    __table_args__ = (
        CheckConstraint("multiplier > 0", name="chk_rank_multiplier_positive"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True)
    multiplier = Column(Numeric(10, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
