"""
Daily evaluations: one per worker per day, each owning its task entries.

Every write recomputes entry scores from the tasks' current targets and
stores the day's total as their sum. Evaluation row and entries are written
in one transaction; callers never see one without the other.
"""
import logging
from datetime import date
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import Conflict, InvalidInput, NotFound
from app.database import atomic
from app.models.evaluation import DailyEvaluation, TaskEntry
from app.models.task import Task
from app.models.worker import Worker
from app.schemas.evaluation import (
    EntryIn,
    EvaluationResponse,
    EvaluationDetailResponse,
    TaskEntryResponse,
)
from app.services.catalog import get_worker, get_tasks_by_id
from app.services.scoring import score, daily_total
from app.utils.dates import parse_month

logger = logging.getLogger(__name__)

ScoredEntry = Tuple[int, int, float]  # task_id, quantity, score


def _validate_entries(entries: Sequence[EntryIn]) -> None:
    if not entries:
        raise InvalidInput("At least one task entry is required")
    for entry in entries:
        if entry.quantity is None or entry.quantity < 0:
            raise InvalidInput(f"Quantity for task {entry.task_id} must be zero or more")


async def _score_entries(db: AsyncSession, entries: Sequence[EntryIn]) -> List[ScoredEntry]:
    _validate_entries(entries)
    tasks = await get_tasks_by_id(db, [entry.task_id for entry in entries])
    return [
        (entry.task_id, entry.quantity, score(entry.quantity, tasks[entry.task_id].target_quantity))
        for entry in entries
    ]


def _entry_rows(evaluation_id: int, scored: List[ScoredEntry]) -> List[TaskEntry]:
    return [
        TaskEntry(evaluation_id=evaluation_id, task_id=task_id, quantity=quantity, score=entry_score)
        for task_id, quantity, entry_score in scored
    ]


def _is_duplicate_day(exc: IntegrityError) -> bool:
    # postgres names the constraint; sqlite names the columns
    message = str(exc.orig)
    return (
        "uq_evaluation_worker_date" in message
        or "UNIQUE constraint failed: daily_evaluations.worker_id, daily_evaluations.date" in message
    )


async def _lock_evaluation(db: AsyncSession, evaluation_id: int) -> DailyEvaluation:
    result = await db.execute(
        select(DailyEvaluation)
        .where(DailyEvaluation.id == evaluation_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    evaluation = result.scalar_one_or_none()
    if evaluation is None:
        raise NotFound(f"Evaluation {evaluation_id} not found")
    return evaluation


async def create_evaluation(
    db: AsyncSession, worker_id: int, on_date: date, entries: Sequence[EntryIn]
) -> Tuple[int, float]:
    """Returns (evaluation_id, total_score)."""
    async with atomic(db):
        _validate_entries(entries)
        await get_worker(db, worker_id)

        existing = await db.execute(
            select(DailyEvaluation.id)
            .where(DailyEvaluation.worker_id == worker_id)
            .where(DailyEvaluation.date == on_date)
        )
        if existing.scalar_one_or_none() is not None:
            logger.warning("Duplicate evaluation rejected: worker=%s date=%s", worker_id, on_date)
            raise Conflict(f"Evaluation already exists for worker {worker_id} on {on_date.isoformat()}")

        scored = await _score_entries(db, entries)
        total = daily_total(entry_score for _, _, entry_score in scored)

        evaluation = DailyEvaluation(worker_id=worker_id, date=on_date, total_score=total)
        db.add(evaluation)
        try:
            await db.flush()
        except IntegrityError as e:
            if not _is_duplicate_day(e):
                raise
            # lost a race with another submission for the same day
            logger.warning("Duplicate evaluation rejected at insert: worker=%s date=%s", worker_id, on_date)
            raise Conflict(f"Evaluation already exists for worker {worker_id} on {on_date.isoformat()}")

        db.add_all(_entry_rows(evaluation.id, scored))

    logger.info(
        "Evaluation %s created: worker=%s date=%s entries=%d total=%.2f",
        evaluation.id, worker_id, on_date, len(scored), total,
    )
    return evaluation.id, total


async def replace_evaluation(
    db: AsyncSession, evaluation_id: int, entries: Sequence[EntryIn]
) -> Tuple[int, float]:
    """Swap in a new set of entries. Worker and date stay as they were."""
    async with atomic(db):
        _validate_entries(entries)
        evaluation = await _lock_evaluation(db, evaluation_id)
        scored = await _score_entries(db, entries)
        total = daily_total(entry_score for _, _, entry_score in scored)

        await db.execute(delete(TaskEntry).where(TaskEntry.evaluation_id == evaluation.id))
        evaluation.total_score = total
        db.add_all(_entry_rows(evaluation.id, scored))

    logger.info("Evaluation %s replaced: entries=%d total=%.2f", evaluation_id, len(scored), total)
    return evaluation_id, total


async def get_evaluation(db: AsyncSession, evaluation_id: int) -> EvaluationDetailResponse:
    result = await db.execute(
        select(DailyEvaluation, Worker.name)
        .join(Worker, Worker.id == DailyEvaluation.worker_id)
        .where(DailyEvaluation.id == evaluation_id)
    )
    row = result.one_or_none()
    if row is None:
        raise NotFound(f"Evaluation {evaluation_id} not found")
    evaluation, worker_name = row

    entry_rows = await db.execute(
        select(TaskEntry, Task.name, Task.target_quantity)
        .join(Task, Task.id == TaskEntry.task_id)
        .where(TaskEntry.evaluation_id == evaluation_id)
        .order_by(TaskEntry.id)
    )
    entries = [
        TaskEntryResponse(
            id=entry.id,
            evaluation_id=entry.evaluation_id,
            task_id=entry.task_id,
            task_name=task_name,
            target_quantity=target_quantity,
            quantity=entry.quantity,
            score=entry.score,
        )
        for entry, task_name, target_quantity in entry_rows.all()
    ]

    return EvaluationDetailResponse(
        id=evaluation.id,
        worker_id=evaluation.worker_id,
        worker_name=worker_name,
        date=evaluation.date,
        total_score=evaluation.total_score,
        entries=entries,
    )


async def list_evaluations(
    db: AsyncSession, month: Optional[str] = None, worker_id: Optional[int] = None
) -> List[EvaluationResponse]:
    query = (
        select(DailyEvaluation, Worker.name)
        .join(Worker, Worker.id == DailyEvaluation.worker_id)
    )
    if month:
        start, end = parse_month(month)
        query = query.where(DailyEvaluation.date >= start).where(DailyEvaluation.date < end)
    if worker_id is not None:
        query = query.where(DailyEvaluation.worker_id == worker_id)

    result = await db.execute(query.order_by(DailyEvaluation.date.desc(), DailyEvaluation.id.desc()))
    return [
        EvaluationResponse(
            id=evaluation.id,
            worker_id=evaluation.worker_id,
            worker_name=worker_name,
            date=evaluation.date,
            total_score=evaluation.total_score,
        )
        for evaluation, worker_name in result.all()
    ]


async def delete_evaluation(db: AsyncSession, evaluation_id: int) -> None:
    async with atomic(db):
        evaluation = await _lock_evaluation(db, evaluation_id)
        await db.execute(delete(TaskEntry).where(TaskEntry.evaluation_id == evaluation.id))
        await db.delete(evaluation)

    logger.info("Evaluation %s deleted", evaluation_id)
