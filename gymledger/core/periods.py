import re
from calendar import monthrange
from dataclasses import dataclass
from datetime import date
from typing import Optional

from fastapi import status

from gymledger.core.exceptions import ServiceError

MES_ANO_PATTERN = r"^(0?[1-9]|1[0-2])/\d{4}$"
_MES_ANO_RE = re.compile(MES_ANO_PATTERN)


@dataclass(frozen=True, order=True)
class MonthPeriod:
    """Calendar month, day 1 through the last day inclusive."""

    year: int
    month: int

    @classmethod
    def parse(cls, mes_ano: str) -> "MonthPeriod":
        """Parse `MM/YYYY` (month 1-indexed, leading zero optional)."""
        value = (mes_ano or "").strip()
        if not _MES_ANO_RE.match(value):
            raise ServiceError("mesAno must be in MM/YYYY format", status.HTTP_400_BAD_REQUEST)
        month, year = value.split("/")
        return cls(year=int(year), month=int(month))

    @classmethod
    def current(cls, today: Optional[date] = None) -> "MonthPeriod":
        today = today or date.today()
        return cls(year=today.year, month=today.month)

    @classmethod
    def from_query(cls, mes_ano: Optional[str]) -> "MonthPeriod":
        return cls.parse(mes_ano) if mes_ano else cls.current()

    @property
    def start(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def end(self) -> date:
        return date(self.year, self.month, monthrange(self.year, self.month)[1])

    def previous(self) -> "MonthPeriod":
        if self.month == 1:
            return MonthPeriod(year=self.year - 1, month=12)
        return MonthPeriod(year=self.year, month=self.month - 1)

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    @property
    def label(self) -> str:
        return f"{self.month:02d}/{self.year}"
