from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel


class TeacherPayrollSummary(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    role: Optional[str] = None  # most used in the month
    rank: Optional[str] = None  # most used in the month
    total_classes: int = 0
    total_attendance: int = 0
    average_attendance: Decimal = Decimal("0.00")
    occupancy: int = 0
    role_value: Decimal = Decimal("0.00")
    rank_value: Decimal = Decimal("0.00")
    total_earnings: Decimal = Decimal("0.00")


class PayrollClassLine(BaseModel):
    class_id: int
    date: date
    start_time: str
    modality: str
    role: str
    rank: str
    capacity: int
    attendance: int
    hourly_rate: Decimal
    multiplier: Decimal
    class_value: Decimal  # attendance x multiplier
    total_value: Decimal  # hourly rate + class_value


class TeacherPayrollDetail(TeacherPayrollSummary):
    period: str
    classes: List[PayrollClassLine] = []


class ModalityBreakdown(BaseModel):
    name: str
    total_classes: int = 0
    total_attendance: int = 0
    average_attendance: Decimal = Decimal("0.00")
    occupancy: int = 0
    total_value: Decimal = Decimal("0.00")


class TeacherAnalysisDetail(TeacherPayrollDetail):
    modalities: List[ModalityBreakdown] = []
