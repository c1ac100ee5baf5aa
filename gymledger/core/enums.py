from enum import Enum
from typing import Optional


class TeacherRole(str, Enum):
    ADMIN = "admin"
    PROFESSOR = "professor"


class Weekday(int, Enum):
    """Python weekday numbering (date.weekday()): 0=Monday .. 6=Sunday."""

    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @classmethod
    def from_label(cls, label: str) -> Optional["Weekday"]:
        try:
            return cls[label.strip().upper()]
        except KeyError:
            return None


# Slot grid columns; Sunday classes exist but are not displayed
BUSINESS_WEEK = [
    Weekday.MONDAY,
    Weekday.TUESDAY,
    Weekday.WEDNESDAY,
    Weekday.THURSDAY,
    Weekday.FRIDAY,
    Weekday.SATURDAY,
]


class FinancialSource(str, Enum):
    """Where a class group's cost/result figures came from."""

    EXACT = "exact"
    ESTIMATED = "estimated"
