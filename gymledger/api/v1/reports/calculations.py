"""Pure report builders over typed ledger rows. No database access here."""

from collections import OrderedDict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple

from gymledger.core.class_groups import ClassGroupKey
from gymledger.core.enums import BUSINESS_WEEK, FinancialSource
from gymledger.core.finance import (
    BlendedRates,
    ClassFinancials,
    Rates,
    ZERO,
    aggregate,
    class_financials,
    estimate_group_financials,
    growth_from_zero_baseline,
    growth_with_unit_floor,
    half_up,
    money,
    occupancy_percent,
    occupancy_ratio,
)
from gymledger.core.ledger import AssignmentRow, SessionRow
from gymledger.core.periods import MonthPeriod

from .schemas import (
    ClassGroupDetailResponse,
    ClassGroupInfo,
    ClassGroupMetric,
    ClassGroupValues,
    ClassOccurrence,
    DashboardMetricsResponse,
    GroupTeacherValue,
    ProfitLossResponse,
    SlotGrid,
)

AssignmentsByClass = Dict[int, List[AssignmentRow]]


def session_financials(
    session: SessionRow,
    assignments_by_class: AssignmentsByClass,
    rates: Rates,
) -> ClassFinancials:
    rows = assignments_by_class.get(session.id, [])
    return class_financials(session.attendance, [a.rate for a in rows], rates)


# Dashboard


@dataclass(frozen=True)
class MonthSummary:
    total_classes: int = 0
    average_occupancy: int = 0
    financials: ClassFinancials = field(default_factory=ClassFinancials)


def summarize_month(
    sessions: Sequence[SessionRow],
    assignments_by_class: AssignmentsByClass,
    rates: Rates,
) -> MonthSummary:
    if not sessions:
        return MonthSummary()
    ratios = [occupancy_ratio(s.attendance, s.capacity) for s in sessions]
    average = half_up(sum(ratios, ZERO) / Decimal(len(ratios)))
    return MonthSummary(
        total_classes=len(sessions),
        average_occupancy=max(0, min(100, average)),
        financials=aggregate(session_financials(s, assignments_by_class, rates) for s in sessions),
    )


def compare_months(
    period: MonthPeriod,
    current: MonthSummary,
    previous: MonthSummary,
) -> DashboardMetricsResponse:
    cur, prev = current.financials, previous.financials
    return DashboardMetricsResponse(
        period=period.label,
        total_classes=current.total_classes,
        average_occupancy=current.average_occupancy,
        total_revenue=money(cur.revenue),
        total_cost=money(cur.cost),
        net_result=money(cur.result),
        classes_growth=growth_with_unit_floor(current.total_classes, previous.total_classes),
        occupancy_growth=growth_with_unit_floor(current.average_occupancy, previous.average_occupancy),
        revenue_growth=growth_from_zero_baseline(cur.revenue, prev.revenue),
        net_result_growth=growth_from_zero_baseline(cur.result, prev.result),
    )


# Profit / loss


def classify_profit_loss(
    sessions: Sequence[SessionRow],
    assignments_by_class: AssignmentsByClass,
    rates: Rates,
) -> ProfitLossResponse:
    """Classes with attendance split by result sign; the rest count as without check-in."""
    profit = loss = 0
    checked_in = [s for s in sessions if s.attendance > 0]
    for session in checked_in:
        if session_financials(session, assignments_by_class, rates).result >= 0:
            profit += 1
        else:
            loss += 1
    return ProfitLossResponse(
        classes_with_profit=profit,
        classes_with_loss=loss,
        classes_without_check_in=len(sessions) - len(checked_in),
        total_classes=len(sessions),
    )


# Class groups


def group_sessions(sessions: Sequence[SessionRow]) -> "OrderedDict[ClassGroupKey, List[SessionRow]]":
    """Group by (start time, weekday, modality), ordered by key."""
    groups: Dict[ClassGroupKey, List[SessionRow]] = {}
    for session in sessions:
        key = ClassGroupKey(start_time=session.start_time, weekday=session.weekday, modality=session.modality)
        groups.setdefault(key, []).append(session)
    return OrderedDict(sorted(groups.items(), key=lambda item: item[0]))


@dataclass(frozen=True)
class GroupFinancials:
    """Tagged result: exact per-class figures, or the blended estimate."""

    source: FinancialSource
    financials: ClassFinancials
    reason: Optional[str] = None

    @classmethod
    def exact(cls, financials: ClassFinancials) -> "GroupFinancials":
        return cls(source=FinancialSource.EXACT, financials=financials)

    @classmethod
    def estimated(cls, financials: ClassFinancials, reason: str) -> "GroupFinancials":
        return cls(source=FinancialSource.ESTIMATED, financials=financials, reason=reason)


def estimate_group(
    sessions: Sequence[SessionRow],
    rates: Rates,
    blended: BlendedRates,
    reason: str,
) -> GroupFinancials:
    total_attendance = sum(s.attendance for s in sessions)
    return GroupFinancials.estimated(
        estimate_group_financials(len(sessions), total_attendance, rates, blended),
        reason,
    )


def group_metric(
    key: ClassGroupKey,
    sessions: Sequence[SessionRow],
    resolved: GroupFinancials,
) -> ClassGroupMetric:
    count = len(sessions)
    total_attendance = sum(s.attendance for s in sessions)
    capacity = sessions[0].capacity if sessions else 0
    fin = resolved.financials
    return ClassGroupMetric(
        id=key.token,
        legacy_id=key.legacy_id,
        modality=key.modality,
        weekday=key.weekday.label,
        start_time=key.start_time,
        class_count=count,
        total_attendance=total_attendance,
        average_attendance=half_up(Decimal(total_attendance) / Decimal(count)) if count else 0,
        revenue=money(fin.revenue),
        cost=money(fin.cost),
        result=money(fin.result),
        occupancy=occupancy_percent(total_attendance, capacity * count),
        source=resolved.source,
    )


def empty_grid(start_times: Sequence[str]) -> SlotGrid:
    """A row per start time with Monday..Saturday columns, all empty."""
    return {
        start_time: {weekday.label: [] for weekday in BUSINESS_WEEK}
        for start_time in sorted(set(start_times))
    }


def place_in_grid(grid: SlotGrid, metric: ClassGroupMetric) -> None:
    row = grid.get(metric.start_time)
    if row is None or metric.weekday not in row:
        # Sunday groups have no column
        return
    row[metric.weekday].append(metric)


@dataclass(frozen=True)
class GroupDetail:
    key: ClassGroupKey
    sessions: Tuple[SessionRow, ...]
    per_class: Tuple[ClassFinancials, ...]
    financials: ClassFinancials
    teachers: Tuple[AssignmentRow, ...]
    total_attendance: int
    average_attendance: int
    capacity: int

    @property
    def class_count(self) -> int:
        return len(self.sessions)

    @property
    def total_capacity(self) -> int:
        return self.capacity * self.class_count


def distinct_teachers(
    sessions: Sequence[SessionRow],
    assignments_by_class: AssignmentsByClass,
) -> List[AssignmentRow]:
    """One row per distinct (teacher, role, rank, rate, multiplier), ordered by name."""
    seen = set()
    distinct: List[AssignmentRow] = []
    for session in sessions:
        for row in assignments_by_class.get(session.id, []):
            ident = (row.teacher_id, row.role_name, row.rank_name, row.hourly_rate, row.multiplier)
            if ident in seen:
                continue
            seen.add(ident)
            distinct.append(row)
    return sorted(distinct, key=lambda r: (r.teacher_name, r.teacher_id, r.role_name, r.rank_name))


def build_group_detail(
    key: ClassGroupKey,
    sessions: Sequence[SessionRow],
    assignments_by_class: AssignmentsByClass,
    rates: Rates,
) -> GroupDetail:
    """Exact group figures: each class priced with its own attendance and assignments, then summed."""
    per_class = tuple(session_financials(s, assignments_by_class, rates) for s in sessions)
    total_attendance = sum(s.attendance for s in sessions)
    count = len(sessions)
    return GroupDetail(
        key=key,
        sessions=tuple(sessions),
        per_class=per_class,
        financials=aggregate(per_class),
        teachers=tuple(distinct_teachers(sessions, assignments_by_class)),
        total_attendance=total_attendance,
        average_attendance=half_up(Decimal(total_attendance) / Decimal(count)) if count else 0,
        capacity=sessions[0].capacity if sessions else 0,
    )


def teacher_display_value(row: AssignmentRow, average_attendance: int) -> Decimal:
    """Approximate value shown next to a teacher on the group page."""
    return row.hourly_rate + Decimal(average_attendance) * row.multiplier


def detail_response(detail: GroupDetail) -> ClassGroupDetailResponse:
    key = detail.key
    fin = detail.financials
    count = Decimal(detail.class_count) if detail.class_count else Decimal(1)
    return ClassGroupDetailResponse(
        id=key.token,
        info=ClassGroupInfo(
            modality=key.modality,
            weekday=key.weekday.label,
            start_time=key.start_time,
            capacity=detail.capacity,
            total_capacity=detail.total_capacity,
            class_count=detail.class_count,
            total_check_ins=detail.total_attendance,
            average_attendance=detail.average_attendance,
            occupancy=occupancy_percent(detail.total_attendance, detail.total_capacity),
        ),
        values=ClassGroupValues(
            average_revenue_per_class=money(fin.revenue / count),
            average_cost_per_class=money(fin.cost / count),
            monthly_revenue=money(fin.revenue),
            monthly_fixed_cost=money(fin.fixed_cost),
            monthly_role_cost=money(fin.role_cost),
            monthly_rank_cost=money(fin.rank_cost),
            monthly_cost=money(fin.cost),
            monthly_result=money(fin.result),
        ),
        classes=[
            ClassOccurrence(
                class_id=session.id,
                date=session.date,
                attendance=session.attendance,
                revenue=money(item.revenue),
                cost=money(item.cost),
                result=money(item.result),
            )
            for session, item in zip(detail.sessions, detail.per_class)
        ],
        teachers=[
            GroupTeacherValue(
                id=row.teacher_id,
                name=row.teacher_name,
                role=row.role_name,
                rank=row.rank_name,
                hourly_rate=money(row.hourly_rate),
                multiplier=money(row.multiplier),
                value_total=money(teacher_display_value(row, detail.average_attendance)),
            )
            for row in detail.teachers
        ],
    )
