import re
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

START_TIME_PATTERN = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


def _normalize_start_time(value: str) -> str:
    match = START_TIME_PATTERN.match((value or "").strip())
    if not match:
        raise ValueError("start_time must be HH:MM")
    return f"{int(match.group(1)):02d}:{match.group(2)}"


def _check_unique_teachers(teachers: List["AssignmentInput"]) -> List["AssignmentInput"]:
    ids = [t.teacher_id for t in teachers]
    if len(ids) != len(set(ids)):
        raise ValueError("A teacher can only be assigned once per class")
    return teachers


class AssignmentInput(BaseModel):
    teacher_id: int
    role_id: int
    rank_id: int


class ClassCreate(BaseModel):
    modality_id: int
    date: date
    start_time: str
    capacity: int = Field(..., gt=0)
    teachers: List[AssignmentInput] = Field(..., min_length=1)

    @field_validator("start_time")
    @classmethod
    def validate_start_time(cls, v: str) -> str:
        return _normalize_start_time(v)

    @field_validator("teachers")
    @classmethod
    def validate_teachers(cls, v: List[AssignmentInput]) -> List[AssignmentInput]:
        return _check_unique_teachers(v)


class ClassSeriesCreate(BaseModel):
    """Same class on the given weekdays (0=Monday .. 6=Sunday) between start_date and end_date inclusive."""

    modality_id: int
    start_date: date
    end_date: date
    weekdays: List[int] = Field(..., min_length=1)
    start_time: str
    capacity: int = Field(..., gt=0)
    teachers: List[AssignmentInput] = Field(..., min_length=1)

    @field_validator("start_time")
    @classmethod
    def validate_start_time(cls, v: str) -> str:
        return _normalize_start_time(v)

    @field_validator("weekdays")
    @classmethod
    def validate_weekdays(cls, v: List[int]) -> List[int]:
        if any(d < 0 or d > 6 for d in v):
            raise ValueError("weekdays must be between 0 (Monday) and 6 (Sunday)")
        return sorted(set(v))

    @field_validator("teachers")
    @classmethod
    def validate_teachers(cls, v: List[AssignmentInput]) -> List[AssignmentInput]:
        return _check_unique_teachers(v)

    @model_validator(mode="after")
    def validate_range(self) -> "ClassSeriesCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class ClassUpdate(BaseModel):
    """Partial edit. When teachers is given it replaces the whole assignment set."""

    modality_id: Optional[int] = None
    date: Optional[date] = None
    start_time: Optional[str] = None
    capacity: Optional[int] = Field(None, gt=0)
    teachers: Optional[List[AssignmentInput]] = Field(None, min_length=1)

    @field_validator("start_time")
    @classmethod
    def validate_start_time(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_start_time(v) if v is not None else None

    @field_validator("teachers")
    @classmethod
    def validate_teachers(cls, v: Optional[List[AssignmentInput]]) -> Optional[List[AssignmentInput]]:
        return _check_unique_teachers(v) if v is not None else None


class CheckInRequest(BaseModel):
    class_id: int
    attendance: int = Field(..., ge=0)


class ClassTeacherInfo(BaseModel):
    id: int
    name: str
    role_id: int
    role: str
    rank_id: int
    rank: str


class ClassResponse(BaseModel):
    id: int
    date: date
    weekday: str
    start_time: str
    capacity: int
    attendance: int
    modality_id: int
    modality: str
    teachers: List[ClassTeacherInfo] = []
    created_at: datetime

    class Config:
        from_attributes = True


class ClassSeriesResponse(BaseModel):
    total_created: int
    classes: List[ClassResponse]
    skipped_dates: List[date] = []
    failed_dates: List[date] = []
    warning: Optional[str] = None
