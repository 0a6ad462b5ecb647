import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.core.auth import get_current_caller
from app.schemas.evaluation import (
    EvaluationCreate,
    EvaluationUpdate,
    EvaluationSaved,
    EvaluationResponse,
    EvaluationDetailResponse,
)
from app.services import evaluations

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/evaluations", tags=["evaluations"])


@router.post("", response_model=EvaluationSaved)
async def submit_evaluation(
    evaluation_in: EvaluationCreate,
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(get_current_caller)
):
    logger.info("Caller %s submits evaluation: worker=%s date=%s",
                caller, evaluation_in.worker_id, evaluation_in.date)
    evaluation_id, total = await evaluations.create_evaluation(
        db, evaluation_in.worker_id, evaluation_in.date, evaluation_in.entries
    )
    return EvaluationSaved(evaluation_id=evaluation_id, total_score=total)


@router.get("", response_model=list[EvaluationResponse])
async def list_evaluations(
    month: Optional[str] = None,
    worker_id: Optional[int] = None,
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(get_current_caller)
):
    return await evaluations.list_evaluations(db, month=month, worker_id=worker_id)


@router.get("/{evaluation_id}", response_model=EvaluationDetailResponse)
async def get_evaluation(
    evaluation_id: int,
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(get_current_caller)
):
    return await evaluations.get_evaluation(db, evaluation_id)


@router.put("/{evaluation_id}", response_model=EvaluationSaved)
async def update_evaluation(
    evaluation_id: int,
    evaluation_in: EvaluationUpdate,
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(get_current_caller)
):
    logger.info("Caller %s replaces evaluation %s", caller, evaluation_id)
    _, total = await evaluations.replace_evaluation(db, evaluation_id, evaluation_in.entries)
    return EvaluationSaved(evaluation_id=evaluation_id, total_score=total)


@router.delete("/{evaluation_id}")
async def delete_evaluation(
    evaluation_id: int,
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(get_current_caller)
):
    logger.info("Caller %s deletes evaluation %s", caller, evaluation_id)
    await evaluations.delete_evaluation(db, evaluation_id)
    return {"success": True}
