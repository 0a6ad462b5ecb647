"""
Tests for evaluations.py - daily evaluation store.
"""

import asyncio
import pytest
from datetime import date
from sqlalchemy import select, func, update
from sqlalchemy.exc import IntegrityError, OperationalError

from app.core.errors import Conflict, InvalidInput, NotFound, TransactionFailure
from app.models.evaluation import DailyEvaluation, TaskEntry
from app.models.task import Task
from app.services import evaluations
from app.services.evaluations import (
    create_evaluation,
    replace_evaluation,
    get_evaluation,
    list_evaluations,
    delete_evaluation,
)


async def count_rows(db, model) -> int:
    return (await db.execute(select(func.count()).select_from(model))).scalar_one()


class TestCreateEvaluation:
    """Submitting a day's task entries."""

    async def test_total_is_sum_of_entry_scores(self, db, worker, task, entries, may_first):
        evaluation_id, total = await create_evaluation(
            db, worker.id, may_first, entries((task.id, 80), (task.id, 120))
        )

        assert total == 200.0
        detail = await get_evaluation(db, evaluation_id)
        assert detail.total_score == 200.0
        assert [e.score for e in detail.entries] == [80.0, 120.0]

    async def test_entries_against_different_targets(self, db, worker, make_task, entries, may_first):
        small = await make_task("Labelling", 40)
        large = await make_task("Sorting", 200)

        _, total = await create_evaluation(db, worker.id, may_first, entries((small.id, 20), (large.id, 300)))

        assert total == 50.0 + 150.0

    async def test_zero_quantity_scores_zero(self, db, worker, task, entries, may_first):
        _, total = await create_evaluation(db, worker.id, may_first, entries((task.id, 0)))
        assert total == 0.0

    async def test_second_submission_same_day_conflicts(self, db, worker, task, entries, may_first):
        first_id, _ = await create_evaluation(db, worker.id, may_first, entries((task.id, 50)))

        with pytest.raises(Conflict):
            await create_evaluation(db, worker.id, may_first, entries((task.id, 100)))

        detail = await get_evaluation(db, first_id)
        assert detail.total_score == 50.0
        assert len(detail.entries) == 1
        assert await count_rows(db, DailyEvaluation) == 1

    async def test_same_day_for_other_worker_is_allowed(self, db, worker, make_worker, task, entries, may_first):
        other = await make_worker("Lina", salary=600.0)
        await create_evaluation(db, worker.id, may_first, entries((task.id, 50)))
        await create_evaluation(db, other.id, may_first, entries((task.id, 70)))

        assert await count_rows(db, DailyEvaluation) == 2

    async def test_unknown_task_writes_nothing(self, db, worker, task, entries, may_first):
        with pytest.raises(NotFound):
            await create_evaluation(db, worker.id, may_first, entries((task.id, 10), (9999, 10)))

        assert await count_rows(db, DailyEvaluation) == 0
        assert await count_rows(db, TaskEntry) == 0

    async def test_unknown_worker(self, db, task, entries, may_first):
        with pytest.raises(NotFound):
            await create_evaluation(db, 4242, may_first, entries((task.id, 10)))

    async def test_empty_entries_rejected(self, db, worker, may_first):
        with pytest.raises(InvalidInput):
            await create_evaluation(db, worker.id, may_first, [])

    async def test_negative_quantity_rejected(self, db, worker, task, entries, may_first):
        with pytest.raises(InvalidInput):
            await create_evaluation(db, worker.id, may_first, entries((task.id, -1)))
        assert await count_rows(db, DailyEvaluation) == 0

    async def test_store_failure_leaves_no_partial_evaluation(self, db, worker, task, entries, may_first, monkeypatch):
        def broken_entry_rows(evaluation_id, scored):
            raise OperationalError("INSERT INTO task_entries", {}, Exception("disk I/O error"))

        monkeypatch.setattr(evaluations, "_entry_rows", broken_entry_rows)

        with pytest.raises(TransactionFailure) as exc_info:
            await create_evaluation(db, worker.id, may_first, entries((task.id, 10)))

        assert exc_info.value.retryable
        assert await count_rows(db, DailyEvaluation) == 0
        assert await count_rows(db, TaskEntry) == 0

    async def test_other_integrity_failure_is_not_a_conflict(self, db, worker, task, entries, may_first, monkeypatch):
        async def fk_failure():
            raise IntegrityError(
                "INSERT INTO daily_evaluations", {}, Exception("FOREIGN KEY constraint failed")
            )

        monkeypatch.setattr(db, "flush", fk_failure)

        with pytest.raises(TransactionFailure):
            await create_evaluation(db, worker.id, may_first, entries((task.id, 10)))

        monkeypatch.undo()
        assert await count_rows(db, DailyEvaluation) == 0

    @pytest.mark.parametrize("message", [
        'duplicate key value violates unique constraint "uq_evaluation_worker_date"',
        "UNIQUE constraint failed: daily_evaluations.worker_id, daily_evaluations.date",
    ])
    def test_duplicate_day_recognised_on_both_dialects(self, message):
        assert evaluations._is_duplicate_day(IntegrityError("INSERT", {}, Exception(message)))

    def test_foreign_key_failure_is_not_a_duplicate_day(self):
        error = IntegrityError("INSERT", {}, Exception("FOREIGN KEY constraint failed"))
        assert not evaluations._is_duplicate_day(error)

    async def test_concurrent_duplicates_create_one_evaluation(self, session_factory, db, worker, task, entries, may_first):
        async def submit(quantity):
            async with session_factory() as session:
                return await create_evaluation(session, worker.id, may_first, entries((task.id, quantity)))

        results = await asyncio.gather(submit(10), submit(20), return_exceptions=True)

        assert sum(1 for r in results if isinstance(r, Conflict)) == 1
        assert sum(1 for r in results if isinstance(r, tuple)) == 1
        assert await count_rows(db, DailyEvaluation) == 1


class TestScoresUseTargetAtWriteTime:
    """Stored entry scores are not re-derived when a task's target changes."""

    async def test_target_change_does_not_touch_existing_scores(self, db, worker, task, entries, may_first):
        evaluation_id, _ = await create_evaluation(db, worker.id, may_first, entries((task.id, 50)))

        await db.execute(update(Task).where(Task.id == task.id).values(target_quantity=50))
        await db.commit()

        detail = await get_evaluation(db, evaluation_id)
        assert detail.entries[0].score == 50.0
        assert detail.entries[0].target_quantity == 50
        assert detail.total_score == 50.0

    async def test_replace_uses_current_target(self, db, worker, task, entries, may_first):
        evaluation_id, _ = await create_evaluation(db, worker.id, may_first, entries((task.id, 50)))

        await db.execute(update(Task).where(Task.id == task.id).values(target_quantity=50))
        await db.commit()

        _, total = await replace_evaluation(db, evaluation_id, entries((task.id, 50)))
        assert total == 100.0


class TestReplaceEvaluation:
    """Editing swaps the whole entry set and recomputes the total."""

    async def test_replace_discards_old_entries(self, db, worker, make_task, task, entries, may_first):
        other = await make_task("Sorting", 20)
        evaluation_id, _ = await create_evaluation(db, worker.id, may_first, entries((task.id, 80), (task.id, 120)))

        _, total = await replace_evaluation(db, evaluation_id, entries((other.id, 10)))

        assert total == 50.0
        detail = await get_evaluation(db, evaluation_id)
        assert detail.total_score == 50.0
        assert [(e.task_name, e.quantity) for e in detail.entries] == [("Sorting", 10)]
        assert detail.worker_id == worker.id
        assert detail.date == may_first
        assert await count_rows(db, TaskEntry) == 1

    async def test_replace_unknown_evaluation(self, db, task, entries):
        with pytest.raises(NotFound):
            await replace_evaluation(db, 777, entries((task.id, 1)))

    async def test_failed_replace_keeps_previous_state(self, db, worker, task, entries, may_first):
        evaluation_id, _ = await create_evaluation(db, worker.id, may_first, entries((task.id, 80)))

        with pytest.raises(NotFound):
            await replace_evaluation(db, evaluation_id, entries((task.id, 10), (555, 1)))

        detail = await get_evaluation(db, evaluation_id)
        assert detail.total_score == 80.0
        assert [e.quantity for e in detail.entries] == [80]

    async def test_replace_with_empty_entries_rejected(self, db, worker, task, entries, may_first):
        evaluation_id, _ = await create_evaluation(db, worker.id, may_first, entries((task.id, 80)))
        with pytest.raises(InvalidInput):
            await replace_evaluation(db, evaluation_id, [])


class TestReadAndDelete:
    """Detail view, monthly listing and deletion."""

    async def test_get_joins_worker_and_task_names(self, db, worker, task, entries, may_first):
        evaluation_id, _ = await create_evaluation(db, worker.id, may_first, entries((task.id, 30)))

        detail = await get_evaluation(db, evaluation_id)

        assert detail.worker_name == "Samir"
        assert detail.entries[0].task_name == "Packing"
        assert detail.entries[0].target_quantity == 100
        assert detail.entries[0].evaluation_id == evaluation_id

    async def test_get_unknown(self, db):
        with pytest.raises(NotFound):
            await get_evaluation(db, 1)

    async def test_list_by_month_newest_first(self, db, worker, task, entries):
        for day in (date(2024, 5, 3), date(2024, 5, 1), date(2024, 5, 20), date(2024, 6, 1)):
            await create_evaluation(db, worker.id, day, entries((task.id, 10)))

        rows = await list_evaluations(db, month="2024-05")

        assert [r.date for r in rows] == [date(2024, 5, 20), date(2024, 5, 3), date(2024, 5, 1)]
        assert all(r.worker_name == "Samir" for r in rows)

    async def test_list_scoped_to_worker(self, db, worker, make_worker, task, entries, may_first):
        other = await make_worker("Lina")
        await create_evaluation(db, worker.id, may_first, entries((task.id, 10)))
        await create_evaluation(db, other.id, may_first, entries((task.id, 10)))

        rows = await list_evaluations(db, month="2024-05", worker_id=other.id)

        assert [r.worker_id for r in rows] == [other.id]

    async def test_list_without_month_returns_everything(self, db, worker, task, entries):
        await create_evaluation(db, worker.id, date(2023, 12, 31), entries((task.id, 10)))
        await create_evaluation(db, worker.id, date(2024, 1, 1), entries((task.id, 10)))

        rows = await list_evaluations(db)
        assert len(rows) == 2

    async def test_list_rejects_malformed_month(self, db):
        with pytest.raises(InvalidInput):
            await list_evaluations(db, month="05/2024")

    async def test_delete_removes_entries_too(self, db, worker, task, entries, may_first):
        evaluation_id, _ = await create_evaluation(db, worker.id, may_first, entries((task.id, 10), (task.id, 20)))

        await delete_evaluation(db, evaluation_id)

        assert await count_rows(db, DailyEvaluation) == 0
        assert await count_rows(db, TaskEntry) == 0
        with pytest.raises(NotFound):
            await get_evaluation(db, evaluation_id)

    async def test_delete_unknown(self, db):
        with pytest.raises(NotFound):
            await delete_evaluation(db, 31337)

    async def test_day_can_be_resubmitted_after_delete(self, db, worker, task, entries, may_first):
        evaluation_id, _ = await create_evaluation(db, worker.id, may_first, entries((task.id, 10)))
        await delete_evaluation(db, evaluation_id)

        _, total = await create_evaluation(db, worker.id, may_first, entries((task.id, 40)))
        assert total == 40.0
