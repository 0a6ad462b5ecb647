"""Read-only lookups into the worker and task catalogs (maintained elsewhere)."""
from typing import Dict, Iterable, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFound
from app.models.task import Task
from app.models.worker import Worker


async def get_worker(db: AsyncSession, worker_id: int) -> Worker:
    result = await db.execute(select(Worker).where(Worker.id == worker_id))
    worker = result.scalar_one_or_none()
    if worker is None:
        raise NotFound(f"Worker {worker_id} not found")
    return worker


async def list_workers(db: AsyncSession) -> List[Worker]:
    result = await db.execute(select(Worker).order_by(Worker.id))
    return list(result.scalars().all())


async def get_task(db: AsyncSession, task_id: int) -> Task:
    result = await db.execute(select(Task).where(Task.id == task_id))
    task = result.scalar_one_or_none()
    if task is None:
        raise NotFound(f"Task {task_id} not found")
    return task


async def list_tasks(db: AsyncSession) -> List[Task]:
    result = await db.execute(select(Task).order_by(Task.id))
    return list(result.scalars().all())


async def get_tasks_by_id(db: AsyncSession, task_ids: Iterable[int]) -> Dict[int, Task]:
    """Fetch several tasks at once; raises NotFound naming the first missing id."""
    wanted = set(task_ids)
    result = await db.execute(select(Task).where(Task.id.in_(wanted)))
    tasks = {task.id: task for task in result.scalars().all()}
    missing = sorted(wanted - tasks.keys())
    if missing:
        raise NotFound(f"Task {missing[0]} not found")
    return tasks
