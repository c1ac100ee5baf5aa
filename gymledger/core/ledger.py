"""
Read access to the class ledger for reporting.

Every query maps its rows into a frozen dataclass right after fetching, so
report code only sees typed values (ints, dates, Decimals), never raw rows.
Weekday filtering and grouping happen in Python on these rows; the queries
themselves stay portable across PostgreSQL and SQLite.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from gymledger.core.config import settings
from gymledger.core.enums import Weekday
from gymledger.core.finance import AssignmentRate, BlendedRates, Rates, ZERO, to_decimal
from gymledger.core.models import (
    ClassAssignment,
    ClassSession,
    FixedValues,
    Modality,
    Rank,
    Role,
    Teacher,
)
from gymledger.core.periods import MonthPeriod


@dataclass(frozen=True)
class SessionRow:
    id: int
    date: date
    start_time: str
    capacity: int
    attendance: int
    modality_id: int
    modality: str

    @property
    def weekday(self) -> Weekday:
        return Weekday(self.date.weekday())


@dataclass(frozen=True)
class AssignmentRow:
    class_id: int
    teacher_id: int
    teacher_name: str
    role_name: str
    hourly_rate: Decimal
    rank_name: str
    multiplier: Decimal

    @property
    def rate(self) -> AssignmentRate:
        return AssignmentRate(hourly_rate=self.hourly_rate, multiplier=self.multiplier)


@dataclass(frozen=True)
class PayrollRow:
    """One assignment of a teacher, with the class it belongs to."""

    teacher_id: int
    class_id: int
    date: date
    start_time: str
    capacity: int
    attendance: int
    modality: str
    role_name: str
    hourly_rate: Decimal
    rank_name: str
    multiplier: Decimal


async def load_rates(db: AsyncSession) -> Rates:
    """Live FixedValues (latest updated_at wins), or the configured defaults."""
    result = await db.execute(
        select(FixedValues).order_by(FixedValues.updated_at.desc(), FixedValues.id.desc()).limit(1)
    )
    row = result.scalar_one_or_none()
    if row is None:
        return Rates(
            revenue_per_student=to_decimal(settings.default_revenue_per_student),
            fixed_cost_per_class=to_decimal(settings.default_fixed_cost_per_class),
        )
    return Rates(
        revenue_per_student=to_decimal(row.revenue_per_student),
        fixed_cost_per_class=to_decimal(row.fixed_cost_per_class),
    )


async def load_sessions(
    db: AsyncSession,
    period: MonthPeriod,
    *,
    modality_id: Optional[int] = None,
    modality_name: Optional[str] = None,
    start_time: Optional[str] = None,
    teacher_id: Optional[int] = None,
    weekday: Optional[Weekday] = None,
) -> List[SessionRow]:
    stmt = (
        select(
            ClassSession.id,
            ClassSession.date,
            ClassSession.start_time,
            ClassSession.capacity,
            ClassSession.attendance,
            ClassSession.modality_id,
            Modality.name,
        )
        .join(Modality, ClassSession.modality_id == Modality.id)
        .where(ClassSession.date >= period.start, ClassSession.date <= period.end)
    )
    if modality_id is not None:
        stmt = stmt.where(ClassSession.modality_id == modality_id)
    if modality_name is not None:
        stmt = stmt.where(Modality.name == modality_name)
    if start_time is not None:
        stmt = stmt.where(ClassSession.start_time == start_time)
    if teacher_id is not None:
        stmt = stmt.where(
            ClassSession.id.in_(
                select(ClassAssignment.class_id).where(ClassAssignment.teacher_id == teacher_id)
            )
        )
    stmt = stmt.order_by(ClassSession.date, ClassSession.start_time, ClassSession.id)
    result = await db.execute(stmt)
    rows = [
        SessionRow(
            id=int(r[0]),
            date=r[1],
            start_time=str(r[2]),
            capacity=int(r[3] or 0),
            attendance=int(r[4] or 0),
            modality_id=int(r[5]),
            modality=str(r[6]),
        )
        for r in result.all()
    ]
    if weekday is not None:
        rows = [r for r in rows if r.weekday == weekday]
    return rows


async def load_assignments(
    db: AsyncSession,
    class_ids: Iterable[int],
) -> Dict[int, List[AssignmentRow]]:
    """Assignments keyed by class id. Classes without teachers map to an empty list."""
    ids = sorted(set(class_ids))
    by_class: Dict[int, List[AssignmentRow]] = {class_id: [] for class_id in ids}
    if not ids:
        return by_class
    stmt = (
        select(
            ClassAssignment.class_id,
            Teacher.id,
            Teacher.name,
            Role.name,
            Role.hourly_rate,
            Rank.name,
            Rank.multiplier,
        )
        .join(Teacher, ClassAssignment.teacher_id == Teacher.id)
        .join(Role, ClassAssignment.role_id == Role.id)
        .join(Rank, ClassAssignment.rank_id == Rank.id)
        .where(ClassAssignment.class_id.in_(ids))
        .order_by(ClassAssignment.class_id, Teacher.name, ClassAssignment.id)
    )
    result = await db.execute(stmt)
    for r in result.all():
        row = AssignmentRow(
            class_id=int(r[0]),
            teacher_id=int(r[1]),
            teacher_name=str(r[2]),
            role_name=str(r[3]),
            hourly_rate=to_decimal(r[4]),
            rank_name=str(r[5]),
            multiplier=to_decimal(r[6]),
        )
        by_class.setdefault(row.class_id, []).append(row)
    return by_class


async def load_payroll_rows(
    db: AsyncSession,
    period: MonthPeriod,
    teacher_ids: Optional[Sequence[int]] = None,
) -> Dict[int, List[PayrollRow]]:
    """Every assignment row in the period, keyed by teacher id."""
    stmt = (
        select(
            ClassAssignment.teacher_id,
            ClassSession.id,
            ClassSession.date,
            ClassSession.start_time,
            ClassSession.capacity,
            ClassSession.attendance,
            Modality.name,
            Role.name,
            Role.hourly_rate,
            Rank.name,
            Rank.multiplier,
        )
        .join(ClassSession, ClassAssignment.class_id == ClassSession.id)
        .join(Modality, ClassSession.modality_id == Modality.id)
        .join(Role, ClassAssignment.role_id == Role.id)
        .join(Rank, ClassAssignment.rank_id == Rank.id)
        .where(ClassSession.date >= period.start, ClassSession.date <= period.end)
        .order_by(ClassSession.date, ClassSession.start_time, ClassSession.id)
    )
    if teacher_ids is not None:
        stmt = stmt.where(ClassAssignment.teacher_id.in_(list(teacher_ids)))
    result = await db.execute(stmt)
    by_teacher: Dict[int, List[PayrollRow]] = defaultdict(list)
    for r in result.all():
        row = PayrollRow(
            teacher_id=int(r[0]),
            class_id=int(r[1]),
            date=r[2],
            start_time=str(r[3]),
            capacity=int(r[4] or 0),
            attendance=int(r[5] or 0),
            modality=str(r[6]),
            role_name=str(r[7]),
            hourly_rate=to_decimal(r[8]),
            rank_name=str(r[9]),
            multiplier=to_decimal(r[10]),
        )
        by_teacher[row.teacher_id].append(row)
    return dict(by_teacher)


def blend_from_ledger(
    sessions: Sequence[SessionRow],
    assignments_by_class: Dict[int, List[AssignmentRow]],
) -> Optional[BlendedRates]:
    """Average role cost per class and summed multiplier per class across the given classes.

    None when none of the classes has an assignment.
    """
    if not sessions:
        return None
    rows = [a for s in sessions for a in assignments_by_class.get(s.id, [])]
    if not rows:
        return None
    count = Decimal(len(sessions))
    return BlendedRates(
        role_cost_per_class=sum((a.hourly_rate for a in rows), ZERO) / count,
        multiplier_per_student=sum((a.multiplier for a in rows), ZERO) / count,
    )


async def load_reference_blend(db: AsyncSession) -> BlendedRates:
    """Plain averages over the Role and Rank tables (one teacher per class assumed)."""
    role_avg = (await db.execute(select(func.avg(Role.hourly_rate)))).scalar()
    rank_avg = (await db.execute(select(func.avg(Rank.multiplier)))).scalar()
    return BlendedRates(
        role_cost_per_class=to_decimal(role_avg),
        multiplier_per_student=to_decimal(rank_avg),
    )


async def load_blended_rates(db: AsyncSession, period: MonthPeriod) -> BlendedRates:
    sessions = await load_sessions(db, period)
    assignments = await load_assignments(db, [s.id for s in sessions])
    blended = blend_from_ledger(sessions, assignments)
    if blended is not None:
        return blended
    return await load_reference_blend(db)
