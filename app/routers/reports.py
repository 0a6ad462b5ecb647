from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.core.auth import get_current_caller
from app.schemas.evaluation import MonthlyReportItem
from app.services.monthly_report import monthly_report

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/monthly", response_model=list[MonthlyReportItem])
async def get_monthly_report(
    month: str,
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(get_current_caller)
):
    """Days worked and average daily score per worker. `month` is YYYY-MM."""
    return await monthly_report(db, month)
