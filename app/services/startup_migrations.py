"""
Versioned data migrations, applied once per database at service startup.

Schema changes belong in Alembic revisions. Steps here rewrite derived data
and are recorded in schema_migrations so each runs once. Steps must also be
safe to re-run, since a crash between the step and its bookkeeping row
would run it again on the next start.
"""
import logging
from typing import Awaitable, Callable, List, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import atomic
from app.models.schema_migration import SchemaMigration
from app.services.score_migration import run_score_migration

logger = logging.getLogger(__name__)

MigrationStep = Callable[[AsyncSession], Awaitable[object]]

# Append only. Versions sort in the order they must run.
STARTUP_MIGRATIONS: List[Tuple[str, MigrationStep]] = [
    ("0001_daily_total_sum", run_score_migration),
]


async def applied_versions(db: AsyncSession) -> set:
    result = await db.execute(select(SchemaMigration.version))
    return set(result.scalars().all())


async def apply_startup_migrations(db: AsyncSession) -> List[str]:
    """Run pending steps in order. Returns the versions applied this time."""
    done = await applied_versions(db)
    applied = []
    for version, step in STARTUP_MIGRATIONS:
        if version in done:
            continue
        logger.info("Applying startup migration %s", version)
        await step(db)
        async with atomic(db):
            db.add(SchemaMigration(version=version))
        applied.append(version)

    if not applied:
        logger.info("No pending startup migrations")
    return applied
