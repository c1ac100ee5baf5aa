"""Dashboard reports router. Every report takes an optional mesAno=MM/YYYY (default: current month)."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from gymledger.auth.dependencies import get_current_user
from gymledger.auth.rbac import require_admin
from gymledger.core.exceptions import ServiceError
from gymledger.core.periods import MES_ANO_PATTERN, MonthPeriod
from gymledger.db.session import get_db

from ..catalog import service as catalog_service
from ..catalog.schemas import ModalityResponse
from ..teachers import service as teachers_service
from ..teachers.schemas import TeacherShort
from .schemas import (
    ClassGroupDetailResponse,
    DashboardMetricsResponse,
    HighlightedTeacher,
    ProfitLossResponse,
    SlotGrid,
)
from . import service

router = APIRouter(prefix="/api/v1/dashboard", tags=["dashboard"])


@router.get(
    "/metrics",
    response_model=DashboardMetricsResponse,
    dependencies=[Depends(require_admin)],
)
async def dashboard_metrics(
    mes_ano: Optional[str] = Query(None, alias="mesAno", pattern=MES_ANO_PATTERN, description="Month as MM/YYYY"),
    db: AsyncSession = Depends(get_db),
) -> DashboardMetricsResponse:
    try:
        return await service.get_dashboard_metrics(db, MonthPeriod.from_query(mes_ano))
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "/aulas-lucro-prejuizo",
    response_model=ProfitLossResponse,
    dependencies=[Depends(require_admin)],
)
async def profit_loss(
    mes_ano: Optional[str] = Query(None, alias="mesAno", pattern=MES_ANO_PATTERN, description="Month as MM/YYYY"),
    db: AsyncSession = Depends(get_db),
) -> ProfitLossResponse:
    try:
        return await service.get_profit_loss(db, MonthPeriod.from_query(mes_ano))
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "/horarios-aulas",
    response_model=SlotGrid,
    dependencies=[Depends(require_admin)],
)
async def slot_grid(
    mes_ano: Optional[str] = Query(None, alias="mesAno", pattern=MES_ANO_PATTERN, description="Month as MM/YYYY"),
    modalidade_id: Optional[int] = Query(None, description="Only this modality"),
    professor_id: Optional[int] = Query(None, description="Only classes taught by this teacher"),
    db: AsyncSession = Depends(get_db),
) -> SlotGrid:
    try:
        return await service.get_slot_grid(
            db,
            MonthPeriod.from_query(mes_ano),
            modality_id=modalidade_id,
            teacher_id=professor_id,
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "/detalhes-aula/{group_id}",
    response_model=ClassGroupDetailResponse,
    dependencies=[Depends(require_admin)],
)
async def class_group_detail(
    group_id: str,
    mes_ano: Optional[str] = Query(None, alias="mesAno", pattern=MES_ANO_PATTERN, description="Month as MM/YYYY"),
    db: AsyncSession = Depends(get_db),
) -> ClassGroupDetailResponse:
    try:
        return await service.get_class_group_detail(db, group_id, MonthPeriod.from_query(mes_ano))
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "/professores-destaque",
    response_model=List[HighlightedTeacher],
    dependencies=[Depends(get_current_user)],
)
async def highlighted_teachers(
    mes_ano: Optional[str] = Query(None, alias="mesAno", pattern=MES_ANO_PATTERN, description="Month as MM/YYYY"),
    limit: int = Query(3, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
) -> List[HighlightedTeacher]:
    try:
        return await service.list_highlighted_teachers(db, MonthPeriod.from_query(mes_ano), limit=limit)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


# Filter options for the financial analysis screens


@router.get(
    "/filtros/modalidades",
    response_model=List[ModalityResponse],
    dependencies=[Depends(get_current_user)],
)
async def filter_modalities(db: AsyncSession = Depends(get_db)) -> List[ModalityResponse]:
    return await catalog_service.list_modalities(db)


@router.get(
    "/filtros/professores",
    response_model=List[TeacherShort],
    dependencies=[Depends(get_current_user)],
)
async def filter_teachers(db: AsyncSession = Depends(get_db)) -> List[TeacherShort]:
    return await teachers_service.list_teachers_short(db)
