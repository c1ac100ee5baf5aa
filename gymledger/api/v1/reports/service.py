"""Dashboard reports over the class ledger for one month."""

import logging
from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from gymledger.auth.models import Teacher
from gymledger.core.class_groups import ClassGroupKey
from gymledger.core.enums import TeacherRole
from gymledger.core.exceptions import NotFoundError
from gymledger.core.finance import BlendedRates, Rates, money
from gymledger.core.ledger import (
    SessionRow,
    load_assignments,
    load_blended_rates,
    load_payroll_rows,
    load_rates,
    load_sessions,
)
from gymledger.core.periods import MonthPeriod

from ..meritocracy.calculations import payroll_totals
from .calculations import (
    GroupDetail,
    GroupFinancials,
    build_group_detail,
    classify_profit_loss,
    compare_months,
    detail_response,
    empty_grid,
    estimate_group,
    group_metric,
    group_sessions,
    place_in_grid,
    summarize_month,
)
from .schemas import (
    ClassGroupDetailResponse,
    DashboardMetricsResponse,
    HighlightedTeacher,
    ProfitLossResponse,
    SlotGrid,
)

logger = logging.getLogger(__name__)


async def _summarize(db: AsyncSession, period: MonthPeriod, rates: Rates):
    sessions = await load_sessions(db, period)
    assignments = await load_assignments(db, [s.id for s in sessions])
    return summarize_month(sessions, assignments, rates)


async def get_dashboard_metrics(db: AsyncSession, period: MonthPeriod) -> DashboardMetricsResponse:
    try:
        rates = await load_rates(db)
        current = await _summarize(db, period, rates)
        previous = await _summarize(db, period.previous(), rates)
    except SQLAlchemyError:
        logger.exception("Failed to compute dashboard metrics for %s", period.label)
        return DashboardMetricsResponse(period=period.label)
    return compare_months(period, current, previous)


async def get_profit_loss(db: AsyncSession, period: MonthPeriod) -> ProfitLossResponse:
    try:
        rates = await load_rates(db)
        sessions = await load_sessions(db, period)
        assignments = await load_assignments(db, [s.id for s in sessions if s.attendance > 0])
    except SQLAlchemyError:
        logger.exception("Failed to classify classes for %s", period.label)
        return ProfitLossResponse()
    return classify_profit_loss(sessions, assignments, rates)


async def price_group(
    db: AsyncSession,
    key: ClassGroupKey,
    sessions: Sequence[SessionRow],
    rates: Rates,
) -> GroupDetail:
    """Exact figures for exactly these classes, each priced with all of its assignments."""
    assignments = await load_assignments(db, [s.id for s in sessions])
    return build_group_detail(key, sessions, assignments, rates)


async def load_group_detail(
    db: AsyncSession,
    key: ClassGroupKey,
    period: MonthPeriod,
    rates: Optional[Rates] = None,
) -> GroupDetail:
    if rates is None:
        rates = await load_rates(db)
    sessions = await load_sessions(
        db,
        period,
        modality_name=key.modality,
        start_time=key.start_time,
        weekday=key.weekday,
    )
    if not sessions:
        raise NotFoundError("Class group not found for this month")
    return await price_group(db, key, sessions, rates)


async def get_class_group_detail(
    db: AsyncSession,
    group_id: str,
    period: MonthPeriod,
) -> ClassGroupDetailResponse:
    key = ClassGroupKey.parse(group_id)
    detail = await load_group_detail(db, key, period)
    return detail_response(detail)


async def get_slot_grid(
    db: AsyncSession,
    period: MonthPeriod,
    modality_id: Optional[int] = None,
    teacher_id: Optional[int] = None,
) -> SlotGrid:
    try:
        rates = await load_rates(db)
        sessions = await load_sessions(db, period, modality_id=modality_id, teacher_id=teacher_id)
    except SQLAlchemyError:
        logger.exception("Failed to load classes for the slot grid of %s", period.label)
        return {}

    groups = group_sessions(sessions)
    grid = empty_grid([key.start_time for key in groups])
    blended: Optional[BlendedRates] = None

    for key, members in groups.items():
        try:
            # Priced from the filtered members, not the whole group
            detail = await price_group(db, key, members, rates)
            resolved = GroupFinancials.exact(detail.financials)
        except SQLAlchemyError as exc:
            logger.warning("Exact figures unavailable for %s (%s); using blended estimate", key.legacy_id, exc)
            await db.rollback()
            if blended is None:
                try:
                    blended = await load_blended_rates(db, period)
                except SQLAlchemyError:
                    logger.exception("Failed to load blended rates for %s", period.label)
                    blended = BlendedRates()
            resolved = estimate_group(members, rates, blended, reason=str(exc))
        place_in_grid(grid, group_metric(key, members, resolved))
    return grid


async def list_highlighted_teachers(
    db: AsyncSession,
    period: MonthPeriod,
    limit: int = 3,
) -> List[HighlightedTeacher]:
    """Professors ranked by attendance over their checked-in classes of the month."""
    try:
        result = await db.execute(
            select(Teacher.id, Teacher.name).where(Teacher.role == TeacherRole.PROFESSOR.value)
        )
        names = {int(r[0]): str(r[1]) for r in result.all()}
        rows_by_teacher = await load_payroll_rows(db, period, teacher_ids=list(names))
    except SQLAlchemyError:
        logger.exception("Failed to list highlighted teachers for %s", period.label)
        return []

    highlights: List[HighlightedTeacher] = []
    for teacher_id, rows in rows_by_teacher.items():
        checked_in = payroll_totals([r for r in rows if r.attendance > 0])
        if not checked_in.total_classes:
            continue
        highlights.append(
            HighlightedTeacher(
                id=teacher_id,
                name=names[teacher_id],
                total_classes=checked_in.total_classes,
                total_attendance=checked_in.total_attendance,
                average_attendance=money(checked_in.average_attendance),
                amount_due=money(payroll_totals(rows).total_earnings),
            )
        )
    highlights.sort(key=lambda h: (-h.total_attendance, h.name))
    return highlights[:limit]
