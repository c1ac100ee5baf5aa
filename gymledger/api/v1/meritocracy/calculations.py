"""
Teacher payroll ("meritocracia").

Exact figures, summed over every assignment row of the teacher in the month:

    role_value     = sum of hourly_rate
    rank_value     = sum of attendance(class) * multiplier(rank on that assignment)
    total_earnings = role_value + rank_value

Nothing here uses group averages. The approximate per-teacher value shown on
the class group page lives in reports.calculations.teacher_display_value.
"""

from collections import Counter
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple

from gymledger.core.finance import ZERO, money, occupancy_percent
from gymledger.core.ledger import PayrollRow

from .schemas import ModalityBreakdown, PayrollClassLine


@dataclass(frozen=True)
class PayrollTotals:
    total_classes: int = 0
    total_attendance: int = 0
    total_capacity: int = 0
    role_value: Decimal = ZERO
    rank_value: Decimal = ZERO

    @property
    def total_earnings(self) -> Decimal:
        return self.role_value + self.rank_value

    @property
    def average_attendance(self) -> Decimal:
        if not self.total_classes:
            return ZERO
        return Decimal(self.total_attendance) / Decimal(self.total_classes)

    @property
    def occupancy(self) -> int:
        return occupancy_percent(self.total_attendance, self.total_capacity)


def payroll_totals(rows: Sequence[PayrollRow]) -> PayrollTotals:
    return PayrollTotals(
        total_classes=len({r.class_id for r in rows}),
        total_attendance=sum(r.attendance for r in rows),
        total_capacity=sum(r.capacity for r in rows),
        role_value=sum((r.hourly_rate for r in rows), ZERO),
        rank_value=sum((r.attendance * r.multiplier for r in rows), ZERO),
    )


def most_used_role_and_rank(rows: Sequence[PayrollRow]) -> Tuple[Optional[str], Optional[str]]:
    """Most frequent (role, rank) pair in the month; ties go to the earliest class."""
    if not rows:
        return None, None
    (role, rank), _ = Counter((r.role_name, r.rank_name) for r in rows).most_common(1)[0]
    return role, rank


def class_line(row: PayrollRow) -> PayrollClassLine:
    return PayrollClassLine(
        class_id=row.class_id,
        date=row.date,
        start_time=row.start_time,
        modality=row.modality,
        role=row.role_name,
        rank=row.rank_name,
        capacity=row.capacity,
        attendance=row.attendance,
        hourly_rate=money(row.hourly_rate),
        multiplier=money(row.multiplier),
        class_value=money(row.attendance * row.multiplier),
        total_value=money(row.hourly_rate + row.attendance * row.multiplier),
    )


def modality_breakdown(rows: Sequence[PayrollRow]) -> List[ModalityBreakdown]:
    """Payroll totals per modality, in the order the modalities first appear in the month."""
    by_modality: Dict[str, List[PayrollRow]] = {}
    for row in rows:
        by_modality.setdefault(row.modality, []).append(row)
    breakdown = []
    for name, members in by_modality.items():
        totals = payroll_totals(members)
        breakdown.append(
            ModalityBreakdown(
                name=name,
                total_classes=totals.total_classes,
                total_attendance=totals.total_attendance,
                average_attendance=money(totals.average_attendance),
                occupancy=totals.occupancy,
                total_value=money(totals.total_earnings),
            )
        )
    return breakdown
