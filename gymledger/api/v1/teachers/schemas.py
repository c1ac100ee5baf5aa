from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from gymledger.core.enums import TeacherRole


class TeacherCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    password: str = Field(..., min_length=6)
    role: TeacherRole = TeacherRole.PROFESSOR


class TeacherUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)
    role: Optional[TeacherRole] = None


class TeacherResponse(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    role: str
    created_at: datetime

    class Config:
        from_attributes = True


class TeacherShort(BaseModel):
    """Name only, for pickers visible to every logged-in teacher."""

    id: int
    name: str

    class Config:
        from_attributes = True
