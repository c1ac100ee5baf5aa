"""Teacher teaching a class under one role and one rank chosen for that specific class."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship

from gymledger.db.session import Base


class ClassAssignment(Base):
    __tablename__ = "class_assignments"
    __table_args__ = (
        UniqueConstraint("class_id", "teacher_id", name="uq_class_assignment_class_teacher"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    class_id = Column(Integer, ForeignKey("class_sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    teacher_id = Column(Integer, ForeignKey("teachers.id", ondelete="CASCADE"), nullable=False, index=True)
    role_id = Column(Integer, ForeignKey("roles.id"), nullable=False)
    rank_id = Column(Integer, ForeignKey("ranks.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    class_session = relationship("ClassSession", back_populates="assignments")
    teacher = relationship("Teacher", back_populates="assignments")
    role = relationship("Role")
    rank = relationship("Rank")
