"""Dashboard report schemas. Money is Decimal with 2 fractional digits."""

from datetime import date
from decimal import Decimal
from typing import Dict, List

from pydantic import BaseModel, Field

from gymledger.core.enums import FinancialSource


class DashboardMetricsResponse(BaseModel):
    period: str
    total_classes: int = 0
    average_occupancy: int = 0
    total_revenue: Decimal = Decimal("0.00")
    total_cost: Decimal = Decimal("0.00")
    net_result: Decimal = Decimal("0.00")
    classes_growth: int = 0
    occupancy_growth: int = 0
    revenue_growth: int = 0
    net_result_growth: int = 0


class ProfitLossResponse(BaseModel):
    classes_with_profit: int = 0
    classes_with_loss: int = 0
    classes_without_check_in: int = 0
    total_classes: int = 0


class ClassGroupMetric(BaseModel):
    """One recurring class (modality on a weekday at a time) within the month."""

    id: str = Field(..., description="Opaque class group id, accepted by /dashboard/detalhes-aula")
    legacy_id: str
    modality: str
    weekday: str
    start_time: str
    class_count: int
    total_attendance: int
    average_attendance: int
    revenue: Decimal
    cost: Decimal
    result: Decimal
    occupancy: int
    source: FinancialSource


# {start_time: {weekday: [ClassGroupMetric, ...]}}
SlotGrid = Dict[str, Dict[str, List[ClassGroupMetric]]]


class ClassGroupInfo(BaseModel):
    modality: str
    weekday: str
    start_time: str
    capacity: int
    total_capacity: int
    class_count: int
    total_check_ins: int
    average_attendance: int
    occupancy: int


class ClassGroupValues(BaseModel):
    average_revenue_per_class: Decimal
    average_cost_per_class: Decimal
    monthly_revenue: Decimal
    monthly_fixed_cost: Decimal
    monthly_role_cost: Decimal
    monthly_rank_cost: Decimal
    monthly_cost: Decimal
    monthly_result: Decimal


class ClassOccurrence(BaseModel):
    class_id: int
    date: date
    attendance: int
    revenue: Decimal
    cost: Decimal
    result: Decimal


class GroupTeacherValue(BaseModel):
    """value_total is an approximate display figure (average attendance based), not payroll."""

    id: int
    name: str
    role: str
    rank: str
    hourly_rate: Decimal
    multiplier: Decimal
    value_total: Decimal


class ClassGroupDetailResponse(BaseModel):
    id: str
    info: ClassGroupInfo
    values: ClassGroupValues
    classes: List[ClassOccurrence]
    teachers: List[GroupTeacherValue]


class HighlightedTeacher(BaseModel):
    id: int
    name: str
    total_classes: int
    total_attendance: int
    average_attendance: Decimal
    amount_due: Decimal
