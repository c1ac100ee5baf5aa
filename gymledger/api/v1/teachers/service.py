import logging
from typing import List, Optional

from fastapi import status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from gymledger.auth.models import Teacher
from gymledger.auth.security import hash_password
from gymledger.core.exceptions import NotFoundError, ServiceError

from .schemas import TeacherCreate, TeacherResponse, TeacherShort, TeacherUpdate

logger = logging.getLogger(__name__)


def _normalize_email(email) -> Optional[str]:
    return str(email).strip().lower() if email else None


async def list_teachers(db: AsyncSession) -> List[TeacherResponse]:
    result = await db.execute(select(Teacher).order_by(Teacher.name))
    return [TeacherResponse.model_validate(t) for t in result.scalars().all()]


async def list_teachers_short(db: AsyncSession) -> List[TeacherShort]:
    result = await db.execute(select(Teacher).order_by(Teacher.name))
    return [TeacherShort.model_validate(t) for t in result.scalars().all()]


async def create_teacher(db: AsyncSession, payload: TeacherCreate) -> TeacherResponse:
    try:
        t = Teacher(
            name=payload.name.strip(),
            email=_normalize_email(payload.email),
            password_hash=hash_password(payload.password),
            role=payload.role.value,
        )
        db.add(t)
        await db.commit()
        await db.refresh(t)
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Email is already in use", status.HTTP_409_CONFLICT)
    logger.info("Created teacher %s (%s)", t.id, t.role)
    return TeacherResponse.model_validate(t)


async def update_teacher(db: AsyncSession, teacher_id: int, payload: TeacherUpdate) -> TeacherResponse:
    t = await db.get(Teacher, teacher_id)
    if not t:
        raise NotFoundError("Teacher not found")
    if payload.name is not None:
        t.name = payload.name.strip()
    if payload.email is not None:
        t.email = _normalize_email(payload.email)
    if payload.password is not None:
        t.password_hash = hash_password(payload.password)
    if payload.role is not None:
        t.role = payload.role.value
    try:
        await db.commit()
        await db.refresh(t)
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Email is already in use", status.HTTP_409_CONFLICT)
    return TeacherResponse.model_validate(t)


async def delete_teacher(db: AsyncSession, teacher_id: int) -> None:
    """Removes the teacher with their class assignments and reset tokens."""
    result = await db.execute(
        select(Teacher)
        .where(Teacher.id == teacher_id)
        .options(selectinload(Teacher.assignments), selectinload(Teacher.reset_tokens))
    )
    t = result.scalar_one_or_none()
    if not t:
        raise NotFoundError("Teacher not found")
    await db.delete(t)
    await db.commit()
    logger.info("Deleted teacher %s", teacher_id)
