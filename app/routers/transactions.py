import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.core.auth import get_current_caller
from app.schemas.ledger import TransactionCreate, TransactionResponse, AccountStatementResponse
from app.services import ledger

logger = logging.getLogger(__name__)

router = APIRouter(tags=["transactions"])


@router.get("/workers/{worker_id}/transactions", response_model=list[TransactionResponse])
async def list_worker_transactions(
    worker_id: int,
    month: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(get_current_caller)
):
    return await ledger.list_transactions(db, worker_id, month)


@router.post("/workers/{worker_id}/transactions", response_model=TransactionResponse)
async def add_worker_transaction(
    worker_id: int,
    transaction_in: TransactionCreate,
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(get_current_caller)
):
    logger.info("Caller %s adds %s entry for worker %s", caller, transaction_in.type, worker_id)
    return await ledger.add_transaction(
        db,
        worker_id,
        transaction_in.type,
        transaction_in.amount,
        transaction_in.date,
        transaction_in.description,
    )


@router.delete("/transactions/{transaction_id}")
async def delete_transaction(
    transaction_id: int,
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(get_current_caller)
):
    logger.info("Caller %s deletes ledger entry %s", caller, transaction_id)
    await ledger.delete_transaction(db, transaction_id)
    return {"success": True}


@router.get("/workers/{worker_id}/statement", response_model=AccountStatementResponse)
async def get_account_statement(
    worker_id: int,
    month: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(get_current_caller)
):
    return await ledger.account_statement(db, worker_id, month)
