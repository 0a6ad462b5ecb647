from typing import List

from sqlalchemy import select, func, and_
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.evaluation import DailyEvaluation
from app.models.worker import Worker
from app.schemas.evaluation import MonthlyReportItem
from app.utils.dates import parse_month


async def monthly_report(db: AsyncSession, month: str) -> List[MonthlyReportItem]:
    """
    Days worked and average daily total per worker for one month.

    Every worker gets a row; workers without evaluations that month have
    days_worked=0 and average_score=None. The average is taken over the
    stored daily totals (one value per day), not over individual entries.
    """
    start, end = parse_month(month)

    result = await db.execute(
        select(
            Worker.id,
            Worker.name,
            func.count(DailyEvaluation.id),
            func.avg(DailyEvaluation.total_score),
        )
        .outerjoin(
            DailyEvaluation,
            and_(
                DailyEvaluation.worker_id == Worker.id,
                DailyEvaluation.date >= start,
                DailyEvaluation.date < end,
            ),
        )
        .group_by(Worker.id, Worker.name)
        .order_by(Worker.id)
    )

    return [
        MonthlyReportItem(
            worker_id=worker_id,
            worker_name=worker_name,
            days_worked=days_worked,
            # avg() comes back as Decimal on some drivers
            average_score=float(average) if average is not None else None,
        )
        for worker_id, worker_name, days_worked, average in result.all()
    ]
