"""Pay grade ("cargo") for teaching a class, e.g. Professor, Estagiário. Paid per class taught."""

from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, Numeric, String

from gymledger.db.session import Base


class Role(Base):
    __tablename__ = "roles"
    __table_args__ = (
        CheckConstraint("hourly_rate > 0", name="chk_role_hourly_rate_positive"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True)
    hourly_rate = Column(Numeric(10, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
