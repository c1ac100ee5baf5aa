"""
Financial formula shared by every report.

For one class c with teacher assignments A(c):

    revenue(c)   = attendance(c) * revenue_per_student
    role_cost(c) = sum of hourly_rate over A(c)
    rank_cost(c) = attendance(c) * sum of multiplier over A(c)
    cost(c)      = fixed_cost_per_class + role_cost(c) + rank_cost(c)
    result(c)    = revenue(c) - cost(c)

Groups of classes (a time slot, a month) are summed component-wise and the
result is taken once on the totals. Averages of per-class results are never
summed.

Everything here is pure: callers load rows and pass plain values in.
"""

from dataclasses import dataclass
from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal
from typing import Iterable, Sequence, Union

Number = Union[int, Decimal]

ZERO = Decimal("0")
CENT = Decimal("0.01")
HUNDRED = Decimal("100")

DEFAULT_REVENUE_PER_STUDENT = Decimal("28.00")
DEFAULT_FIXED_COST_PER_CLASS = Decimal("78.00")


def to_decimal(value) -> Decimal:
    if value is None:
        return ZERO
    return value if isinstance(value, Decimal) else Decimal(str(value))


def money(value: Number) -> Decimal:
    """Quantize to 2 decimal places (currency)."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def half_up(value: Number) -> int:
    """Round to the nearest integer, halves towards +infinity (floor(x + 0.5))."""
    return int((to_decimal(value) + Decimal("0.5")).to_integral_value(rounding=ROUND_FLOOR))


@dataclass(frozen=True)
class Rates:
    """Live FixedValues row, or the defaults when none exists."""

    revenue_per_student: Decimal = DEFAULT_REVENUE_PER_STUDENT
    fixed_cost_per_class: Decimal = DEFAULT_FIXED_COST_PER_CLASS


@dataclass(frozen=True)
class AssignmentRate:
    """Role hourly rate and rank multiplier of one teacher on one class."""

    hourly_rate: Decimal
    multiplier: Decimal


@dataclass(frozen=True)
class ClassFinancials:
    revenue: Decimal = ZERO
    fixed_cost: Decimal = ZERO
    role_cost: Decimal = ZERO
    rank_cost: Decimal = ZERO

    @property
    def cost(self) -> Decimal:
        return self.fixed_cost + self.role_cost + self.rank_cost

    @property
    def result(self) -> Decimal:
        return self.revenue - self.cost

    def __add__(self, other: "ClassFinancials") -> "ClassFinancials":
        return ClassFinancials(
            revenue=self.revenue + other.revenue,
            fixed_cost=self.fixed_cost + other.fixed_cost,
            role_cost=self.role_cost + other.role_cost,
            rank_cost=self.rank_cost + other.rank_cost,
        )


def class_financials(
    attendance: int,
    assignments: Sequence[AssignmentRate],
    rates: Rates,
) -> ClassFinancials:
    """Financials of a single class from its own assignments.

    Teachers are paid their role rate even when nobody shows up, so an empty
    class still costs fixed + role cost.
    """
    attendance = max(int(attendance or 0), 0)
    hourly_total = sum((a.hourly_rate for a in assignments), ZERO)
    multiplier_total = sum((a.multiplier for a in assignments), ZERO)
    return ClassFinancials(
        revenue=attendance * rates.revenue_per_student,
        fixed_cost=rates.fixed_cost_per_class,
        role_cost=hourly_total,
        rank_cost=attendance * multiplier_total,
    )


def aggregate(items: Iterable[ClassFinancials]) -> ClassFinancials:
    total = ClassFinancials()
    for item in items:
        total = total + item
    return total


@dataclass(frozen=True)
class BlendedRates:
    """Average per-class role cost and per-student rank multiplier used when a group's
    own assignments cannot be looked up."""

    role_cost_per_class: Decimal = ZERO
    multiplier_per_student: Decimal = ZERO


def estimate_group_financials(
    class_count: int,
    total_attendance: int,
    rates: Rates,
    blended: BlendedRates,
) -> ClassFinancials:
    return ClassFinancials(
        revenue=total_attendance * rates.revenue_per_student,
        fixed_cost=class_count * rates.fixed_cost_per_class,
        role_cost=class_count * blended.role_cost_per_class,
        rank_cost=total_attendance * blended.multiplier_per_student,
    )


def occupancy_percent(attendance: int, capacity: int) -> int:
    """Attendance over capacity as a rounded percentage; 0 when capacity is 0."""
    if not capacity or capacity <= 0:
        return 0
    ratio = Decimal(max(attendance or 0, 0)) / Decimal(capacity)
    return max(0, min(100, half_up(ratio * HUNDRED)))


def occupancy_ratio(attendance: int, capacity: int) -> Decimal:
    """Unrounded percentage, for averaging across classes."""
    if not capacity or capacity <= 0:
        return ZERO
    return Decimal(max(attendance or 0, 0)) * HUNDRED / Decimal(capacity)


def growth_with_unit_floor(current: Number, previous: Number) -> int:
    """Growth for counts and occupancy: a previous value of 0 is treated as 1."""
    current = to_decimal(current)
    previous = to_decimal(previous) or Decimal(1)
    return half_up((current - previous) / previous * HUNDRED)


def growth_from_zero_baseline(current: Number, previous: Number) -> int:
    """Growth for money: 100 when starting from 0 with a positive current value, else 0.

    A negative previous value divides by its magnitude so that a smaller loss
    reads as growth.
    """
    current = to_decimal(current)
    previous = to_decimal(previous)
    if previous == 0:
        return 100 if current > 0 else 0
    return half_up((current - previous) / abs(previous) * HUNDRED)
