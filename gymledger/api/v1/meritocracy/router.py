from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from gymledger.auth.rbac import require_admin, require_self_or_admin
from gymledger.core.exceptions import ServiceError
from gymledger.core.periods import MES_ANO_PATTERN, MonthPeriod
from gymledger.db.session import get_db

from .schemas import TeacherAnalysisDetail, TeacherPayrollDetail, TeacherPayrollSummary
from . import service

router = APIRouter(prefix="/api/v1/meritocracia", tags=["meritocracia"])
analysis_router = APIRouter(prefix="/api/v1/analise-professores", tags=["analise-professores"])


@router.get(
    "/professores",
    response_model=List[TeacherPayrollSummary],
    dependencies=[Depends(require_admin)],
)
async def list_payroll(
    mes_ano: Optional[str] = Query(None, alias="mesAno", pattern=MES_ANO_PATTERN),
    db: AsyncSession = Depends(get_db),
) -> List[TeacherPayrollSummary]:
    try:
        return await service.list_teacher_payroll(db, MonthPeriod.from_query(mes_ano))
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "/professor/{professor_id}",
    response_model=TeacherPayrollDetail,
    dependencies=[Depends(require_self_or_admin)],
)
async def teacher_payroll(
    professor_id: int,
    mes_ano: Optional[str] = Query(None, alias="mesAno", pattern=MES_ANO_PATTERN),
    db: AsyncSession = Depends(get_db),
) -> TeacherPayrollDetail:
    try:
        return await service.get_teacher_payroll(db, professor_id, MonthPeriod.from_query(mes_ano))
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


# Teacher analysis


@analysis_router.get(
    "",
    response_model=List[TeacherPayrollSummary],
    dependencies=[Depends(require_admin)],
)
async def list_analysis(
    mes_ano: Optional[str] = Query(None, alias="mesAno", pattern=MES_ANO_PATTERN),
    db: AsyncSession = Depends(get_db),
) -> List[TeacherPayrollSummary]:
    try:
        return await service.list_teacher_payroll(db, MonthPeriod.from_query(mes_ano))
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@analysis_router.get(
    "/detalhe/{professor_id}",
    response_model=TeacherAnalysisDetail,
    dependencies=[Depends(require_admin)],
)
async def teacher_analysis(
    professor_id: int,
    mes_ano: Optional[str] = Query(None, alias="mesAno", pattern=MES_ANO_PATTERN),
    db: AsyncSession = Depends(get_db),
) -> TeacherAnalysisDetail:
    try:
        return await service.get_teacher_analysis(db, professor_id, MonthPeriod.from_query(mes_ano))
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
