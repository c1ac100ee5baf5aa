"""Reference data service layer. Names are unique per table."""

import logging
from typing import List, Optional, Type

from fastapi import status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from gymledger.core.exceptions import NotFoundError, ServiceError
from gymledger.core.finance import money
from gymledger.core.ledger import load_rates
from gymledger.core.models import FixedValues, Modality, Rank, Role

from .schemas import (
    FixedValuesResponse,
    FixedValuesUpdate,
    ModalityCreate,
    ModalityResponse,
    ModalityUpdate,
    RankCreate,
    RankResponse,
    RankUpdate,
    RoleCreate,
    RoleResponse,
    RoleUpdate,
)

logger = logging.getLogger(__name__)


async def _save(db: AsyncSession, obj, label: str):
    try:
        db.add(obj)
        await db.commit()
        await db.refresh(obj)
        return obj
    except IntegrityError:
        await db.rollback()
        raise ServiceError(f"{label} name already exists", status.HTTP_409_CONFLICT)


async def _get_or_404(db: AsyncSession, model: Type, obj_id: int, label: str):
    obj = await db.get(model, obj_id)
    if not obj:
        raise NotFoundError(f"{label} not found")
    return obj


async def _delete(db: AsyncSession, model: Type, obj_id: int, label: str) -> None:
    obj = await _get_or_404(db, model, obj_id, label)
    try:
        await db.delete(obj)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError(f"{label} is used by existing classes", status.HTTP_409_CONFLICT)
    logger.info("Deleted %s %s", label.lower(), obj_id)


# Modalities


async def list_modalities(db: AsyncSession) -> List[ModalityResponse]:
    result = await db.execute(select(Modality).order_by(Modality.name))
    return [ModalityResponse.model_validate(m) for m in result.scalars().all()]


async def create_modality(db: AsyncSession, payload: ModalityCreate) -> ModalityResponse:
    m = await _save(db, Modality(name=payload.name.strip()), "Modality")
    return ModalityResponse.model_validate(m)


async def update_modality(db: AsyncSession, modality_id: int, payload: ModalityUpdate) -> ModalityResponse:
    m = await _get_or_404(db, Modality, modality_id, "Modality")
    if payload.name is not None:
        m.name = payload.name.strip()
    return ModalityResponse.model_validate(await _save(db, m, "Modality"))


async def delete_modality(db: AsyncSession, modality_id: int) -> None:
    await _delete(db, Modality, modality_id, "Modality")


# Roles


async def list_roles(db: AsyncSession) -> List[RoleResponse]:
    result = await db.execute(select(Role).order_by(Role.name))
    return [RoleResponse.model_validate(r) for r in result.scalars().all()]


async def create_role(db: AsyncSession, payload: RoleCreate) -> RoleResponse:
    r = await _save(db, Role(name=payload.name.strip(), hourly_rate=payload.hourly_rate), "Role")
    return RoleResponse.model_validate(r)


async def update_role(db: AsyncSession, role_id: int, payload: RoleUpdate) -> RoleResponse:
    r = await _get_or_404(db, Role, role_id, "Role")
    if payload.name is not None:
        r.name = payload.name.strip()
    if payload.hourly_rate is not None:
        r.hourly_rate = payload.hourly_rate
    return RoleResponse.model_validate(await _save(db, r, "Role"))


async def delete_role(db: AsyncSession, role_id: int) -> None:
    await _delete(db, Role, role_id, "Role")


# Ranks


async def list_ranks(db: AsyncSession) -> List[RankResponse]:
    result = await db.execute(select(Rank).order_by(Rank.name))
    return [RankResponse.model_validate(r) for r in result.scalars().all()]


async def create_rank(db: AsyncSession, payload: RankCreate) -> RankResponse:
    r = await _save(db, Rank(name=payload.name.strip(), multiplier=payload.multiplier), "Rank")
    return RankResponse.model_validate(r)


async def update_rank(db: AsyncSession, rank_id: int, payload: RankUpdate) -> RankResponse:
    r = await _get_or_404(db, Rank, rank_id, "Rank")
    if payload.name is not None:
        r.name = payload.name.strip()
    if payload.multiplier is not None:
        r.multiplier = payload.multiplier
    return RankResponse.model_validate(await _save(db, r, "Rank"))


async def delete_rank(db: AsyncSession, rank_id: int) -> None:
    await _delete(db, Rank, rank_id, "Rank")


# Fixed values


async def _latest_fixed_values(db: AsyncSession) -> Optional[FixedValues]:
    result = await db.execute(
        select(FixedValues).order_by(FixedValues.updated_at.desc(), FixedValues.id.desc()).limit(1)
    )
    return result.scalar_one_or_none()


async def get_fixed_values(db: AsyncSession) -> FixedValuesResponse:
    row = await _latest_fixed_values(db)
    if row is None:
        rates = await load_rates(db)
        return FixedValuesResponse(
            revenue_per_student=money(rates.revenue_per_student),
            fixed_cost_per_class=money(rates.fixed_cost_per_class),
        )
    return FixedValuesResponse(
        id=row.id,
        revenue_per_student=money(row.revenue_per_student),
        fixed_cost_per_class=money(row.fixed_cost_per_class),
        updated_at=row.updated_at,
    )


async def set_fixed_values(db: AsyncSession, payload: FixedValuesUpdate) -> FixedValuesResponse:
    """Update the live row in place, or create it on first use."""
    row = await _latest_fixed_values(db)
    if row is None:
        row = FixedValues(
            revenue_per_student=payload.revenue_per_student,
            fixed_cost_per_class=payload.fixed_cost_per_class,
        )
        db.add(row)
    else:
        row.revenue_per_student = payload.revenue_per_student
        row.fixed_cost_per_class = payload.fixed_cost_per_class
    await db.commit()
    await db.refresh(row)
    logger.info(
        "Fixed values set: %s per student, %s per class",
        payload.revenue_per_student,
        payload.fixed_cost_per_class,
    )
    return await get_fixed_values(db)
