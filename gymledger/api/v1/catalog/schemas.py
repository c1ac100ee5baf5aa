"""Reference data schemas: modalities, roles (cargos), ranks (patentes) and fixed values."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class ModalityCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class ModalityUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)


class ModalityResponse(BaseModel):
    id: int
    name: str
    created_at: datetime

    class Config:
        from_attributes = True


class RoleCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    hourly_rate: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)


class RoleUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    hourly_rate: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)


class RoleResponse(BaseModel):
    id: int
    name: str
    hourly_rate: Decimal
    created_at: datetime

    class Config:
        from_attributes = True


class RankCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    multiplier: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)


class RankUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    multiplier: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)


class RankResponse(BaseModel):
    id: int
    name: str
    multiplier: Decimal
    created_at: datetime

    class Config:
        from_attributes = True


class FixedValuesUpdate(BaseModel):
    revenue_per_student: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    fixed_cost_per_class: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)


class FixedValuesResponse(BaseModel):
    """id is None while the defaults are in effect (no row stored yet)."""

    id: Optional[int] = None
    revenue_per_student: Decimal
    fixed_cost_per_class: Decimal
    updated_at: Optional[datetime] = None
