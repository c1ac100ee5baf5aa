from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from gymledger.auth.dependencies import get_current_user
from gymledger.auth.rbac import require_admin
from gymledger.auth.schemas import CurrentUser
from gymledger.core.enums import Weekday
from gymledger.core.exceptions import ServiceError
from gymledger.db.session import get_db

from .schemas import (
    CheckInRequest,
    ClassCreate,
    ClassResponse,
    ClassSeriesCreate,
    ClassSeriesResponse,
    ClassTeacherInfo,
    ClassUpdate,
)
from . import service

router = APIRouter(prefix="/api/v1/aulas", tags=["aulas"])
checkin_router = APIRouter(prefix="/api/v1/checkin", tags=["checkin"])


@router.post(
    "",
    response_model=ClassResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_class(
    payload: ClassCreate,
    db: AsyncSession = Depends(get_db),
) -> ClassResponse:
    try:
        return await service.create_class(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post(
    "/serie",
    response_model=ClassSeriesResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_class_series(
    payload: ClassSeriesCreate,
    db: AsyncSession = Depends(get_db),
) -> ClassSeriesResponse:
    """Recurring classes on the chosen weekdays. 400 when no class could be created."""
    try:
        result = await service.create_class_series(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if result.total_created == 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No class was created: every date already has this class or failed",
        )
    return result


@router.get(
    "",
    response_model=List[ClassResponse],
    dependencies=[Depends(get_current_user)],
)
async def list_classes(
    modalidade_id: Optional[int] = Query(None),
    dia_semana: Optional[int] = Query(None, ge=0, le=6, description="0=Monday .. 6=Sunday"),
    data_inicio: Optional[date] = Query(None),
    data_fim: Optional[date] = Query(None),
    busca: Optional[str] = Query(None, max_length=100, description="Modality or teacher name"),
    db: AsyncSession = Depends(get_db),
) -> List[ClassResponse]:
    return await service.list_classes(
        db,
        modality_id=modalidade_id,
        weekday=Weekday(dia_semana) if dia_semana is not None else None,
        start_date=data_inicio,
        end_date=data_fim,
        search=busca,
    )


@router.get(
    "/disponiveis-checkin",
    response_model=List[ClassResponse],
    dependencies=[Depends(get_current_user)],
)
async def classes_for_check_in(
    db: AsyncSession = Depends(get_db),
) -> List[ClassResponse]:
    return await service.list_classes_for_check_in(db)


@router.get("/com-presenca", response_model=List[ClassResponse])
async def classes_with_attendance(
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> List[ClassResponse]:
    # Professors only see their own classes
    teacher_id = None if current_user.is_admin else current_user.id
    return await service.list_classes_with_attendance(db, teacher_id=teacher_id, limit=limit)


@router.get(
    "/{class_id}/professores",
    response_model=List[ClassTeacherInfo],
    dependencies=[Depends(get_current_user)],
)
async def class_teachers(
    class_id: int,
    db: AsyncSession = Depends(get_db),
) -> List[ClassTeacherInfo]:
    try:
        return await service.get_class_teachers(db, class_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.patch(
    "/{class_id}",
    response_model=ClassResponse,
    dependencies=[Depends(require_admin)],
)
async def update_class(
    class_id: int,
    payload: ClassUpdate,
    db: AsyncSession = Depends(get_db),
) -> ClassResponse:
    try:
        return await service.update_class(db, class_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete(
    "/{class_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
async def delete_class(
    class_id: int,
    db: AsyncSession = Depends(get_db),
) -> None:
    try:
        await service.delete_class(db, class_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@checkin_router.post(
    "",
    response_model=ClassResponse,
    dependencies=[Depends(get_current_user)],
)
async def check_in(
    payload: CheckInRequest,
    db: AsyncSession = Depends(get_db),
) -> ClassResponse:
    try:
        return await service.check_in(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
