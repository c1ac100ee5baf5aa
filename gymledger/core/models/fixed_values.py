"""System-wide financial constants. Effectively a singleton: the most recently updated row is live."""

from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, Numeric

from gymledger.db.session import Base


class FixedValues(Base):
    __tablename__ = "fixed_values"
    __table_args__ = (
        CheckConstraint("revenue_per_student > 0", name="chk_fixed_values_revenue_positive"),
        CheckConstraint("fixed_cost_per_class >= 0", name="chk_fixed_values_cost_non_negative"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    revenue_per_student = Column(Numeric(10, 2), nullable=False)
    fixed_cost_per_class = Column(Numeric(10, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
