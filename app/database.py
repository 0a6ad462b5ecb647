# app/database.py
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base

from app.config import settings
from app.core.errors import EngineError, TransactionFailure

logger = logging.getLogger(__name__)

engine = create_async_engine(settings.async_database_url, echo=settings.SQL_ECHO)

AsyncSessionLocal = async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)
Base = declarative_base()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session


@asynccontextmanager
async def atomic(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    Run a unit of work as one transaction on `db`.

    Commits when the block exits cleanly. Any exception rolls back
    everything done in the block; store errors come out as
    TransactionFailure so callers can tell them apart from validation errors.
    """
    try:
        yield db
        await db.commit()
    except EngineError:
        await db.rollback()
        raise
    except SQLAlchemyError as e:
        await db.rollback()
        logger.warning("Transaction aborted by the store: %s", e)
        raise TransactionFailure("The database aborted the transaction; retry the request.") from e
    except Exception:
        await db.rollback()
        raise
