# app/main.py
import logging

from fastapi import FastAPI

from app.config import settings
from app.core.errors import EngineError, engine_error_handler
from app.core.logging import configure_logging
from app.database import engine, AsyncSessionLocal, Base
from app.models.task import Task  # noqa: F401  (registers tables on Base.metadata)
from app.models.worker import Worker  # noqa: F401
from app.models.evaluation import DailyEvaluation, TaskEntry  # noqa: F401
from app.models.attendance import AttendanceRecord  # noqa: F401
from app.models.transaction import WorkerTransaction  # noqa: F401
from app.models.schema_migration import SchemaMigration  # noqa: F401
from app.routers import evaluations, reports, attendance, transactions, admin
from app.services.startup_migrations import apply_startup_migrations

logger = logging.getLogger(__name__)

app = FastAPI(title="Worker Scoring & Ledger Service", version="1.0")

app.add_exception_handler(EngineError, engine_error_handler)

# Include Routers
app.include_router(evaluations.router)
app.include_router(reports.router)
app.include_router(attendance.router)
app.include_router(transactions.router)
app.include_router(admin.router)


@app.on_event("startup")
async def startup_event():
    configure_logging(settings.LOG_LEVEL)

    # Local runs only; deployed databases get their schema from Alembic.
    if settings.AUTO_CREATE_TABLES:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    if settings.RUN_STARTUP_MIGRATIONS:
        async with AsyncSessionLocal() as session:
            applied = await apply_startup_migrations(session)
        if applied:
            logger.info("Startup migrations applied: %s", ", ".join(applied))


@app.on_event("shutdown")
async def shutdown_event():
    await engine.dispose()


@app.get("/")
def read_root():
    return {"message": "Worker Scoring & Ledger Service"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
