"""Class ledger writes and listings: scheduling, recurring series, edits and check-in."""

import asyncio
import logging
from datetime import date, timedelta
from typing import List, Optional, Sequence

from fastapi import status
from sqlalchemy import delete, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from gymledger.core.config import settings
from gymledger.core.enums import Weekday
from gymledger.core.exceptions import NotFoundError, ServiceError
from gymledger.core.models import ClassAssignment, ClassSession, Modality, Rank, Role, Teacher

from .schemas import (
    AssignmentInput,
    CheckInRequest,
    ClassCreate,
    ClassResponse,
    ClassSeriesCreate,
    ClassSeriesResponse,
    ClassTeacherInfo,
    ClassUpdate,
)

logger = logging.getLogger(__name__)

CHECKIN_WINDOW_DAYS = 7


def _load_options():
    return (
        selectinload(ClassSession.modality),
        selectinload(ClassSession.assignments).selectinload(ClassAssignment.teacher),
        selectinload(ClassSession.assignments).selectinload(ClassAssignment.role),
        selectinload(ClassSession.assignments).selectinload(ClassAssignment.rank),
    )


def _teacher_info(a: ClassAssignment) -> ClassTeacherInfo:
    return ClassTeacherInfo(
        id=a.teacher_id,
        name=a.teacher.name if a.teacher else "",
        role_id=a.role_id,
        role=a.role.name if a.role else "",
        rank_id=a.rank_id,
        rank=a.rank.name if a.rank else "",
    )


def _to_response(c: ClassSession) -> ClassResponse:
    teachers = sorted((_teacher_info(a) for a in c.assignments), key=lambda t: t.name)
    return ClassResponse(
        id=c.id,
        date=c.date,
        weekday=Weekday(c.date.weekday()).label,
        start_time=c.start_time,
        capacity=c.capacity,
        attendance=c.attendance or 0,
        modality_id=c.modality_id,
        modality=c.modality.name if c.modality else "",
        teachers=teachers,
        created_at=c.created_at,
    )


async def _get_class(db: AsyncSession, class_id: int) -> Optional[ClassSession]:
    result = await db.execute(
        select(ClassSession)
        .where(ClassSession.id == class_id)
        .options(*_load_options())
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _ensure_exists(db: AsyncSession, model, ids: Sequence[int], label: str) -> None:
    wanted = set(ids)
    if not wanted:
        return
    result = await db.execute(select(model.id).where(model.id.in_(wanted)))
    found = {row[0] for row in result.all()}
    missing = sorted(wanted - found)
    if missing:
        raise ServiceError(
            f"Invalid {label} id(s): {', '.join(str(m) for m in missing)}",
            status.HTTP_400_BAD_REQUEST,
        )


async def _validate_references(
    db: AsyncSession,
    modality_id: Optional[int],
    teachers: Optional[Sequence[AssignmentInput]],
) -> None:
    if modality_id is not None:
        await _ensure_exists(db, Modality, [modality_id], "modality")
    if teachers:
        await _ensure_exists(db, Teacher, [t.teacher_id for t in teachers], "teacher")
        await _ensure_exists(db, Role, [t.role_id for t in teachers], "role")
        await _ensure_exists(db, Rank, [t.rank_id for t in teachers], "rank")


def _assignments(teachers: Sequence[AssignmentInput]) -> List[ClassAssignment]:
    return [
        ClassAssignment(teacher_id=t.teacher_id, role_id=t.role_id, rank_id=t.rank_id)
        for t in teachers
    ]


async def create_class(db: AsyncSession, payload: ClassCreate) -> ClassResponse:
    await _validate_references(db, payload.modality_id, payload.teachers)
    c = ClassSession(
        modality_id=payload.modality_id,
        date=payload.date,
        start_time=payload.start_time,
        capacity=payload.capacity,
        attendance=0,
        assignments=_assignments(payload.teachers),
    )
    db.add(c)
    await db.commit()
    logger.info("Created class %s (%s %s)", c.id, payload.date, payload.start_time)
    return _to_response(await _get_class(db, c.id))


def series_dates(start: date, end: date, weekdays: Sequence[int]) -> List[date]:
    wanted = set(weekdays)
    days = (end - start).days
    return [
        start + timedelta(days=offset)
        for offset in range(days + 1)
        if (start + timedelta(days=offset)).weekday() in wanted
    ]


async def _slot_taken(db: AsyncSession, modality_id: int, day: date, start_time: str) -> bool:
    result = await db.execute(
        select(ClassSession.id).where(
            ClassSession.modality_id == modality_id,
            ClassSession.date == day,
            ClassSession.start_time == start_time,
        ).limit(1)
    )
    return result.first() is not None


async def create_class_series(
    db: AsyncSession,
    payload: ClassSeriesCreate,
    batch_size: Optional[int] = None,
    pause_seconds: Optional[float] = None,
) -> ClassSeriesResponse:
    """
    Create one class per matching date, committing each date on its own.

    Dates that already hold the same modality at the same time are skipped.
    A failed insert rolls back only that date; the rest of the series goes on.
    Dates are processed in batches with a short pause in between to spare the pool.
    """
    batch_size = max(1, batch_size or settings.series_batch_size)
    pause = settings.series_batch_pause_seconds if pause_seconds is None else pause_seconds

    await _validate_references(db, payload.modality_id, payload.teachers)
    dates = series_dates(payload.start_date, payload.end_date, payload.weekdays)
    if not dates:
        raise ServiceError("No dates match the selected weekdays in this range", status.HTTP_400_BAD_REQUEST)

    created_ids: List[int] = []
    skipped: List[date] = []
    failed: List[date] = []

    for start in range(0, len(dates), batch_size):
        batch = dates[start:start + batch_size]
        for day in batch:
            try:
                if await _slot_taken(db, payload.modality_id, day, payload.start_time):
                    skipped.append(day)
                    continue
                c = ClassSession(
                    modality_id=payload.modality_id,
                    date=day,
                    start_time=payload.start_time,
                    capacity=payload.capacity,
                    attendance=0,
                    assignments=_assignments(payload.teachers),
                )
                db.add(c)
                await db.commit()
                created_ids.append(c.id)
            except SQLAlchemyError:
                await db.rollback()
                logger.exception("Failed to create class on %s", day)
                failed.append(day)
        logger.info(
            "Series batch %d: %d created, %d skipped, %d failed so far",
            start // batch_size + 1,
            len(created_ids),
            len(skipped),
            len(failed),
        )
        if start + batch_size < len(dates) and pause > 0:
            await asyncio.sleep(pause)

    classes = [_to_response(c) for c in await _get_classes(db, created_ids)]
    warning = None
    if failed and created_ids:
        warning = f"{len(created_ids)} classes created, {len(failed)} dates failed"
    return ClassSeriesResponse(
        total_created=len(created_ids),
        classes=classes,
        skipped_dates=skipped,
        failed_dates=failed,
        warning=warning,
    )


async def _get_classes(db: AsyncSession, class_ids: Sequence[int]) -> List[ClassSession]:
    if not class_ids:
        return []
    result = await db.execute(
        select(ClassSession)
        .where(ClassSession.id.in_(list(class_ids)))
        .options(*_load_options())
        .order_by(ClassSession.date, ClassSession.start_time)
    )
    return list(result.scalars().all())


async def list_classes(
    db: AsyncSession,
    modality_id: Optional[int] = None,
    weekday: Optional[Weekday] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    search: Optional[str] = None,
) -> List[ClassResponse]:
    stmt = select(ClassSession).options(*_load_options())
    if modality_id is not None:
        stmt = stmt.where(ClassSession.modality_id == modality_id)
    if start_date is not None:
        stmt = stmt.where(ClassSession.date >= start_date)
    if end_date is not None:
        stmt = stmt.where(ClassSession.date <= end_date)
    if search and search.strip():
        term = f"%{search.strip()}%"
        stmt = stmt.where(
            or_(
                ClassSession.modality_id.in_(select(Modality.id).where(Modality.name.ilike(term))),
                ClassSession.id.in_(
                    select(ClassAssignment.class_id)
                    .join(Teacher, ClassAssignment.teacher_id == Teacher.id)
                    .where(Teacher.name.ilike(term))
                ),
            )
        )
    stmt = stmt.order_by(ClassSession.date, ClassSession.start_time, ClassSession.id)
    result = await db.execute(stmt)
    classes = result.scalars().all()
    if weekday is not None:
        classes = [c for c in classes if c.date.weekday() == weekday]
    return [_to_response(c) for c in classes]


async def list_classes_for_check_in(db: AsyncSession, today: Optional[date] = None) -> List[ClassResponse]:
    """Classes from today through the next CHECKIN_WINDOW_DAYS days."""
    today = today or date.today()
    return await list_classes(
        db,
        start_date=today,
        end_date=today + timedelta(days=CHECKIN_WINDOW_DAYS),
    )


async def list_classes_with_attendance(
    db: AsyncSession,
    teacher_id: Optional[int] = None,
    limit: int = 20,
) -> List[ClassResponse]:
    stmt = (
        select(ClassSession)
        .where(ClassSession.attendance > 0)
        .options(*_load_options())
        .order_by(ClassSession.date.desc(), ClassSession.start_time.desc())
    )
    if teacher_id is not None:
        stmt = stmt.where(
            ClassSession.id.in_(
                select(ClassAssignment.class_id).where(ClassAssignment.teacher_id == teacher_id)
            )
        )
    stmt = stmt.limit(limit)
    result = await db.execute(stmt)
    return [_to_response(c) for c in result.scalars().all()]


async def get_class_teachers(db: AsyncSession, class_id: int) -> List[ClassTeacherInfo]:
    c = await _get_class(db, class_id)
    if not c:
        raise NotFoundError("Class not found")
    return _to_response(c).teachers


async def update_class(db: AsyncSession, class_id: int, payload: ClassUpdate) -> ClassResponse:
    c = await db.get(ClassSession, class_id)
    if not c:
        raise NotFoundError("Class not found")
    await _validate_references(db, payload.modality_id, payload.teachers)

    if payload.modality_id is not None:
        c.modality_id = payload.modality_id
    if payload.date is not None:
        c.date = payload.date
    if payload.start_time is not None:
        c.start_time = payload.start_time
    if payload.capacity is not None:
        c.capacity = payload.capacity
    if payload.teachers is not None:
        # Old set is deleted before the new one is inserted, in the same transaction
        await db.execute(delete(ClassAssignment).where(ClassAssignment.class_id == class_id))
        for a in _assignments(payload.teachers):
            a.class_id = class_id
            db.add(a)
    try:
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        raise
    logger.info("Updated class %s", class_id)
    return _to_response(await _get_class(db, class_id))


async def delete_class(db: AsyncSession, class_id: int) -> None:
    c = await _get_class(db, class_id)
    if not c:
        raise NotFoundError("Class not found")
    await db.delete(c)
    await db.commit()
    logger.info("Deleted class %s", class_id)


async def check_in(db: AsyncSession, payload: CheckInRequest) -> ClassResponse:
    """Record the head count of a class. No locking: the last write wins."""
    c = await db.get(ClassSession, payload.class_id)
    if not c:
        raise NotFoundError("Class not found")
    if payload.attendance > c.capacity:
        raise ServiceError(
            f"Attendance ({payload.attendance}) exceeds class capacity ({c.capacity})",
            status.HTTP_400_BAD_REQUEST,
        )
    c.attendance = payload.attendance
    await db.commit()
    logger.info("Check-in for class %s: %s attendees", c.id, payload.attendance)
    return _to_response(await _get_class(db, c.id))
