"""Scheduled class occurrence ("aula"). attendance is the checked-in head count, not a list of students."""

from datetime import datetime

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from gymledger.db.session import Base


class ClassSession(Base):
    __tablename__ = "class_sessions"
    __table_args__ = (
        CheckConstraint("capacity > 0", name="chk_class_capacity_positive"),
        CheckConstraint("attendance >= 0", name="chk_class_attendance_non_negative"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    date = Column(Date, nullable=False, index=True)
    start_time = Column(String(5), nullable=False)  # HH:MM
    capacity = Column(Integer, nullable=False)
    # attendance <= capacity is enforced at check-in, not here
    attendance = Column(Integer, nullable=False, default=0)
    modality_id = Column(Integer, ForeignKey("modalities.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    modality = relationship("Modality")
    assignments = relationship(
        "ClassAssignment",
        back_populates="class_session",
        cascade="all, delete-orphan",
    )
