"""Reference data routers. Reads need a login; writes need an admin."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from gymledger.auth.dependencies import get_current_user
from gymledger.auth.rbac import require_admin
from gymledger.core.exceptions import ServiceError
from gymledger.db.session import get_db

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
from . import service

modalities_router = APIRouter(prefix="/api/v1/modalidades", tags=["modalidades"])
roles_router = APIRouter(prefix="/api/v1/cargos", tags=["cargos"])
ranks_router = APIRouter(prefix="/api/v1/patentes", tags=["patentes"])
fixed_values_router = APIRouter(prefix="/api/v1/valores-fixos", tags=["valores-fixos"])


# Modalities


@modalities_router.get("", response_model=List[ModalityResponse], dependencies=[Depends(get_current_user)])
async def list_modalities(db: AsyncSession = Depends(get_db)) -> List[ModalityResponse]:
    return await service.list_modalities(db)


@modalities_router.post(
    "",
    response_model=ModalityResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_modality(payload: ModalityCreate, db: AsyncSession = Depends(get_db)) -> ModalityResponse:
    try:
        return await service.create_modality(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@modalities_router.patch("/{modality_id}", response_model=ModalityResponse, dependencies=[Depends(require_admin)])
async def update_modality(
    modality_id: int,
    payload: ModalityUpdate,
    db: AsyncSession = Depends(get_db),
) -> ModalityResponse:
    try:
        return await service.update_modality(db, modality_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@modalities_router.delete(
    "/{modality_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
async def delete_modality(modality_id: int, db: AsyncSession = Depends(get_db)) -> None:
    try:
        await service.delete_modality(db, modality_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


# Roles


@roles_router.get("", response_model=List[RoleResponse], dependencies=[Depends(get_current_user)])
async def list_roles(db: AsyncSession = Depends(get_db)) -> List[RoleResponse]:
    return await service.list_roles(db)


@roles_router.post(
    "",
    response_model=RoleResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_role(payload: RoleCreate, db: AsyncSession = Depends(get_db)) -> RoleResponse:
    try:
        return await service.create_role(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@roles_router.patch("/{role_id}", response_model=RoleResponse, dependencies=[Depends(require_admin)])
async def update_role(role_id: int, payload: RoleUpdate, db: AsyncSession = Depends(get_db)) -> RoleResponse:
    try:
        return await service.update_role(db, role_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@roles_router.delete(
    "/{role_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
async def delete_role(role_id: int, db: AsyncSession = Depends(get_db)) -> None:
    try:
        await service.delete_role(db, role_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


# Ranks


@ranks_router.get("", response_model=List[RankResponse], dependencies=[Depends(get_current_user)])
async def list_ranks(db: AsyncSession = Depends(get_db)) -> List[RankResponse]:
    return await service.list_ranks(db)


@ranks_router.post(
    "",
    response_model=RankResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_rank(payload: RankCreate, db: AsyncSession = Depends(get_db)) -> RankResponse:
    try:
        return await service.create_rank(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@ranks_router.patch("/{rank_id}", response_model=RankResponse, dependencies=[Depends(require_admin)])
async def update_rank(rank_id: int, payload: RankUpdate, db: AsyncSession = Depends(get_db)) -> RankResponse:
    try:
        return await service.update_rank(db, rank_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@ranks_router.delete(
    "/{rank_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
async def delete_rank(rank_id: int, db: AsyncSession = Depends(get_db)) -> None:
    try:
        await service.delete_rank(db, rank_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


# Fixed values


@fixed_values_router.get("", response_model=FixedValuesResponse, dependencies=[Depends(require_admin)])
async def get_fixed_values(db: AsyncSession = Depends(get_db)) -> FixedValuesResponse:
    return await service.get_fixed_values(db)


@fixed_values_router.post("", response_model=FixedValuesResponse, dependencies=[Depends(require_admin)])
async def set_fixed_values(payload: FixedValuesUpdate, db: AsyncSession = Depends(get_db)) -> FixedValuesResponse:
    return await service.set_fixed_values(db, payload)
