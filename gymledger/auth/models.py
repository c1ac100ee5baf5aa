from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from gymledger.db.session import Base


class Teacher(Base):
    """Staff member who teaches classes. role is the access flag: admin or professor."""

    __tablename__ = "teachers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    # Optional; unique when present (NULLs never collide)
    email = Column(String(255), nullable=True, unique=True)
    password_hash = Column(Text, nullable=False)
    role = Column(String(20), nullable=False, default="professor")
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    assignments = relationship(
        "ClassAssignment", back_populates="teacher", cascade="all, delete-orphan"
    )
    reset_tokens = relationship(
        "PasswordResetToken", back_populates="teacher", cascade="all, delete-orphan"
    )


class PasswordResetToken(Base):
    """Single-use password reset token. Invalid once used or past expires_at."""

    __tablename__ = "password_reset_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    teacher_id = Column(Integer, ForeignKey("teachers.id", ondelete="CASCADE"), nullable=False)
    token = Column(String(255), nullable=False, unique=True, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    used = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    teacher = relationship("Teacher", back_populates="reset_tokens")
