"""Teacher payroll for a month, computed from each assignment row."""

import logging
from typing import List, Tuple

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from gymledger.auth.models import Teacher
from gymledger.core.enums import TeacherRole
from gymledger.core.exceptions import NotFoundError
from gymledger.core.finance import money
from gymledger.core.ledger import PayrollRow, load_payroll_rows
from gymledger.core.periods import MonthPeriod

from .calculations import class_line, modality_breakdown, most_used_role_and_rank, payroll_totals
from .schemas import (
    PayrollClassLine,
    TeacherAnalysisDetail,
    TeacherPayrollDetail,
    TeacherPayrollSummary,
)

logger = logging.getLogger(__name__)


def _summary_fields(teacher: Teacher, rows: List[PayrollRow]) -> dict:
    totals = payroll_totals(rows)
    role, rank = most_used_role_and_rank(rows)
    return dict(
        id=teacher.id,
        name=teacher.name,
        email=teacher.email,
        role=role,
        rank=rank,
        total_classes=totals.total_classes,
        total_attendance=totals.total_attendance,
        average_attendance=money(totals.average_attendance),
        occupancy=totals.occupancy,
        role_value=money(totals.role_value),
        rank_value=money(totals.rank_value),
        total_earnings=money(totals.total_earnings),
    )


async def list_teacher_payroll(db: AsyncSession, period: MonthPeriod) -> List[TeacherPayrollSummary]:
    """Every professor, highest earnings first. Teachers without classes appear with zeros."""
    try:
        result = await db.execute(
            select(Teacher)
            .where(Teacher.role == TeacherRole.PROFESSOR.value)
            .order_by(Teacher.name)
        )
        teachers = result.scalars().all()
        rows_by_teacher = await load_payroll_rows(db, period, teacher_ids=[t.id for t in teachers])
    except SQLAlchemyError:
        logger.exception("Failed to compute payroll for %s", period.label)
        return []

    summaries = [
        TeacherPayrollSummary(**_summary_fields(t, rows_by_teacher.get(t.id, [])))
        for t in teachers
    ]
    # Stable sort keeps name order among equal totals
    summaries.sort(key=lambda s: s.total_earnings, reverse=True)
    return summaries


async def _teacher_rows(
    db: AsyncSession,
    teacher_id: int,
    period: MonthPeriod,
) -> Tuple[Teacher, List[PayrollRow]]:
    teacher = await db.get(Teacher, teacher_id)
    if not teacher:
        raise NotFoundError("Teacher not found")
    try:
        rows = (await load_payroll_rows(db, period, teacher_ids=[teacher_id])).get(teacher_id, [])
    except SQLAlchemyError:
        logger.exception("Failed to load payroll rows for teacher %s in %s", teacher_id, period.label)
        rows = []
    return teacher, rows


async def get_teacher_payroll(
    db: AsyncSession,
    teacher_id: int,
    period: MonthPeriod,
) -> TeacherPayrollDetail:
    teacher, rows = await _teacher_rows(db, teacher_id, period)
    return TeacherPayrollDetail(
        period=period.label,
        classes=[class_line(r) for r in rows],
        **_summary_fields(teacher, rows),
    )


async def get_teacher_profile(
    db: AsyncSession,
    teacher_id: int,
    period: MonthPeriod,
) -> TeacherPayrollSummary:
    """Monthly profile: the payroll summary without the class lines."""
    teacher, rows = await _teacher_rows(db, teacher_id, period)
    return TeacherPayrollSummary(**_summary_fields(teacher, rows))


async def list_teacher_classes(
    db: AsyncSession,
    teacher_id: int,
    period: MonthPeriod,
) -> List[PayrollClassLine]:
    _, rows = await _teacher_rows(db, teacher_id, period)
    return [class_line(r) for r in rows]


async def get_teacher_analysis(
    db: AsyncSession,
    teacher_id: int,
    period: MonthPeriod,
) -> TeacherAnalysisDetail:
    teacher, rows = await _teacher_rows(db, teacher_id, period)
    return TeacherAnalysisDetail(
        period=period.label,
        classes=[class_line(r) for r in rows],
        modalities=modality_breakdown(rows),
        **_summary_fields(teacher, rows),
    )
