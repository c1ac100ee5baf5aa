from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from gymledger.auth.dependencies import get_current_user
from gymledger.auth.rbac import require_admin, require_self_or_admin
from gymledger.core.exceptions import ServiceError
from gymledger.core.periods import MES_ANO_PATTERN, MonthPeriod
from gymledger.db.session import get_db

from ..meritocracy import service as payroll_service
from ..meritocracy.schemas import PayrollClassLine, TeacherPayrollSummary
from .schemas import TeacherCreate, TeacherResponse, TeacherShort, TeacherUpdate
from . import service

router = APIRouter(prefix="/api/v1/professores", tags=["professores"])


@router.get("", response_model=List[TeacherResponse], dependencies=[Depends(require_admin)])
async def list_teachers(db: AsyncSession = Depends(get_db)) -> List[TeacherResponse]:
    return await service.list_teachers(db)


@router.get("/lista", response_model=List[TeacherShort], dependencies=[Depends(get_current_user)])
async def list_teachers_short(db: AsyncSession = Depends(get_db)) -> List[TeacherShort]:
    return await service.list_teachers_short(db)


@router.get(
    "/{professor_id}",
    response_model=TeacherPayrollSummary,
    dependencies=[Depends(require_self_or_admin)],
)
async def teacher_profile(
    professor_id: int,
    mes_ano: Optional[str] = Query(None, alias="mesAno", pattern=MES_ANO_PATTERN),
    db: AsyncSession = Depends(get_db),
) -> TeacherPayrollSummary:
    try:
        return await payroll_service.get_teacher_profile(db, professor_id, MonthPeriod.from_query(mes_ano))
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "/{professor_id}/aulas",
    response_model=List[PayrollClassLine],
    dependencies=[Depends(require_self_or_admin)],
)
async def teacher_classes(
    professor_id: int,
    mes_ano: Optional[str] = Query(None, alias="mesAno", pattern=MES_ANO_PATTERN),
    db: AsyncSession = Depends(get_db),
) -> List[PayrollClassLine]:
    try:
        return await payroll_service.list_teacher_classes(db, professor_id, MonthPeriod.from_query(mes_ano))
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post(
    "",
    response_model=TeacherResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_teacher(payload: TeacherCreate, db: AsyncSession = Depends(get_db)) -> TeacherResponse:
    try:
        return await service.create_teacher(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.patch("/{teacher_id}", response_model=TeacherResponse, dependencies=[Depends(require_admin)])
async def update_teacher(
    teacher_id: int,
    payload: TeacherUpdate,
    db: AsyncSession = Depends(get_db),
) -> TeacherResponse:
    try:
        return await service.update_teacher(db, teacher_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete(
    "/{teacher_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
async def delete_teacher(teacher_id: int, db: AsyncSession = Depends(get_db)) -> None:
    try:
        await service.delete_teacher(db, teacher_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
