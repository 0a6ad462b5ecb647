"""
Rewrite every stored daily total with the sum formula.

Runs as one transaction: either every evaluation is rewritten or none is.
Entry scores are re-derived from the tasks' current targets on the way.
Running it again afterwards changes nothing, because a sum recomputed from
the same entries is the same sum.

Deployment precondition: run offline or at startup, not while evaluations
are being written. There is no lock against concurrent evaluation writes.
"""
import logging
import math
from collections import defaultdict
from typing import Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import atomic
from app.models.evaluation import DailyEvaluation, TaskEntry
from app.models.task import Task
from app.schemas.evaluation import ScoreMigrationResult
from app.services.scoring import score, daily_total, legacy_daily_average

logger = logging.getLogger(__name__)


def _same(a: float, b: float) -> bool:
    return math.isclose(a, b, rel_tol=1e-9, abs_tol=1e-9)


async def run_score_migration(db: AsyncSession) -> ScoreMigrationResult:
    async with atomic(db):
        evaluations = (
            await db.execute(
                select(DailyEvaluation)
                .order_by(DailyEvaluation.id)
                .execution_options(populate_existing=True)
            )
        ).scalars().all()

        entry_rows = await db.execute(
            select(TaskEntry, Task.target_quantity)
            .join(Task, Task.id == TaskEntry.task_id)
            .order_by(TaskEntry.id)
            .execution_options(populate_existing=True)
        )
        entries_by_evaluation: Dict[int, List[TaskEntry]] = defaultdict(list)
        targets: Dict[int, int] = {}
        for entry, target_quantity in entry_rows.all():
            entries_by_evaluation[entry.evaluation_id].append(entry)
            targets[entry.id] = target_quantity

        evaluations_updated = 0
        entries_updated = 0
        legacy_totals_found = 0

        for evaluation in evaluations:
            entries = entries_by_evaluation.get(evaluation.id, [])
            old_scores = [entry.score for entry in entries]

            for entry in entries:
                new_score = score(entry.quantity, targets[entry.id])
                if not _same(entry.score, new_score):
                    entry.score = new_score
                    entries_updated += 1

            new_total = daily_total(entry.score for entry in entries)
            if _same(evaluation.total_score, new_total):
                continue

            if len(entries) > 1 and _same(evaluation.total_score, legacy_daily_average(old_scores)):
                legacy_totals_found += 1
            evaluation.total_score = new_total
            evaluations_updated += 1

    summary = ScoreMigrationResult(
        evaluations_scanned=len(evaluations),
        evaluations_updated=evaluations_updated,
        entries_updated=entries_updated,
        legacy_totals_found=legacy_totals_found,
    )
    logger.info(
        "Score migration finished: scanned=%d updated=%d entries_updated=%d legacy_averages=%d",
        summary.evaluations_scanned, summary.evaluations_updated,
        summary.entries_updated, summary.legacy_totals_found,
    )
    return summary
