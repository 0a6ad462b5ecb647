import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.core.auth import get_current_caller
from app.schemas.evaluation import ScoreMigrationResult
from app.services.score_migration import run_score_migration

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/score-migration", response_model=ScoreMigrationResult)
async def score_migration(
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(get_current_caller)
):
    """
    Recompute every stored daily total as the sum of its entry scores.
    Idempotent; meant for maintenance windows, not alongside live writes.
    """
    logger.info("Caller %s started the score migration", caller)
    return await run_score_migration(db)
