"""
Worker ledger and its reconciliation with attendance.

Marking a worker absent posts one deduction (monthly salary divided by
DEDUCTION_DAYS_PER_MONTH, 30 by default) dated to that day; moving the day
to any other status removes it again. The posted entry is found by type
"deduction" plus its description, which embeds the date (see
absence_deduction_key). There is no foreign key from ledger to attendance.

Attendance and ledger changes commit together. The attendance row for
(worker, date) is locked for the duration, so two simultaneous "absent"
submissions for the same day are serialized and only one deduction is posted.
"""
import logging
import math
from datetime import date, time
from typing import List, Optional, Tuple

from sqlalchemy import select, insert, func
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.errors import InvalidInput, NotFound
from app.database import atomic
from app.models.attendance import AttendanceRecord, ATTENDANCE_STATUSES
from app.models.transaction import WorkerTransaction, CREDIT_TYPES, DEBIT_TYPES, TRANSACTION_TYPES
from app.schemas.ledger import AccountStatementResponse, TransactionResponse
from app.services.catalog import get_worker
from app.utils.dates import parse_month

logger = logging.getLogger(__name__)

ABSENT = "absent"

LEDGER_CREATED = "created"
LEDGER_REMOVED = "removed"
LEDGER_UNCHANGED = "unchanged"


def absence_deduction_key(on_date: date) -> str:
    """Description of the auto-posted deduction for `on_date`. Do not change the format."""
    return f"Absence deduction - {on_date.isoformat()}"


def absence_deduction_amount(salary: Optional[float]) -> float:
    if not salary:
        return 0.0
    return round(salary / settings.DEDUCTION_DAYS_PER_MONTH, 2)


async def _lock_attendance(db: AsyncSession, worker_id: int, on_date: date) -> Optional[AttendanceRecord]:
    result = await db.execute(
        select(AttendanceRecord)
        .where(AttendanceRecord.worker_id == worker_id)
        .where(AttendanceRecord.date == on_date)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _insert_attendance_if_missing(db: AsyncSession, worker_id: int, on_date: date, status: str) -> bool:
    """
    Insert a bare attendance row unless (worker, date) already has one.
    Returns True if this call inserted it. A racing insert for the same day
    waits on the unique constraint and then inserts nothing.
    """
    values = {"worker_id": worker_id, "date": on_date, "status": status}
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        stmt = pg_insert(AttendanceRecord).values(**values).on_conflict_do_nothing(
            index_elements=["worker_id", "date"]
        )
    elif dialect == "sqlite":
        stmt = sqlite_insert(AttendanceRecord).values(**values).on_conflict_do_nothing(
            index_elements=["worker_id", "date"]
        )
    else:
        if await _lock_attendance(db, worker_id, on_date) is not None:
            return False
        stmt = insert(AttendanceRecord).values(**values)

    result = await db.execute(stmt)
    return result.rowcount == 1


async def _find_absence_deductions(db: AsyncSession, worker_id: int, on_date: date) -> List[WorkerTransaction]:
    result = await db.execute(
        select(WorkerTransaction)
        .where(WorkerTransaction.worker_id == worker_id)
        .where(WorkerTransaction.type == "deduction")
        .where(WorkerTransaction.description == absence_deduction_key(on_date))
    )
    return list(result.scalars().all())


async def upsert_attendance(
    db: AsyncSession,
    worker_id: int,
    on_date: date,
    status: str,
    check_in: Optional[time] = None,
    check_out: Optional[time] = None,
    notes: Optional[str] = None,
) -> Tuple[AttendanceRecord, str]:
    """
    Create or update the attendance record for (worker, date) and bring the
    ledger in line with the new status.

    Returns the record and what happened to the ledger: "created",
    "removed" or "unchanged".
    """
    if status not in ATTENDANCE_STATUSES:
        raise InvalidInput(f"Invalid attendance status {status!r}; expected one of {', '.join(ATTENDANCE_STATUSES)}")

    async with atomic(db):
        worker = await get_worker(db, worker_id)

        created = await _insert_attendance_if_missing(db, worker_id, on_date, status)
        record = await _lock_attendance(db, worker_id, on_date)
        previous_status = None if created else record.status

        record.status = status
        record.check_in = check_in
        record.check_out = check_out
        record.notes = notes

        existing = await _find_absence_deductions(db, worker_id, on_date)
        action = LEDGER_UNCHANGED
        if status == ABSENT:
            amount = absence_deduction_amount(worker.salary)
            if not existing and amount > 0:
                db.add(WorkerTransaction(
                    worker_id=worker_id,
                    type="deduction",
                    amount=amount,
                    date=on_date,
                    description=absence_deduction_key(on_date),
                ))
                action = LEDGER_CREATED
        elif existing:
            for entry in existing:
                await db.delete(entry)
            action = LEDGER_REMOVED

        await db.flush()

    logger.info(
        "Attendance worker=%s date=%s status %s -> %s, ledger %s",
        worker_id, on_date, previous_status, status, action,
    )
    return record, action


async def list_attendance(
    db: AsyncSession,
    on_date: Optional[date] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    worker_id: Optional[int] = None,
) -> List[AttendanceRecord]:
    query = select(AttendanceRecord)
    if on_date is not None:
        query = query.where(AttendanceRecord.date == on_date)
    if start_date is not None:
        query = query.where(AttendanceRecord.date >= start_date)
    if end_date is not None:
        query = query.where(AttendanceRecord.date <= end_date)
    if worker_id is not None:
        query = query.where(AttendanceRecord.worker_id == worker_id)

    result = await db.execute(query.order_by(AttendanceRecord.date, AttendanceRecord.worker_id))
    return list(result.scalars().all())


def _month_filter(query, month: Optional[str]):
    if month:
        start, end = parse_month(month)
        query = query.where(WorkerTransaction.date >= start).where(WorkerTransaction.date < end)
    return query


async def list_transactions(
    db: AsyncSession, worker_id: int, month: Optional[str] = None
) -> List[WorkerTransaction]:
    await get_worker(db, worker_id)
    query = _month_filter(select(WorkerTransaction).where(WorkerTransaction.worker_id == worker_id), month)
    result = await db.execute(query.order_by(WorkerTransaction.date.desc(), WorkerTransaction.id.desc()))
    return list(result.scalars().all())


async def add_transaction(
    db: AsyncSession,
    worker_id: int,
    type: str,
    amount: float,
    on_date: date,
    description: Optional[str] = None,
) -> WorkerTransaction:
    if type not in TRANSACTION_TYPES:
        raise InvalidInput(f"Invalid transaction type {type!r}; expected one of {', '.join(TRANSACTION_TYPES)}")
    if amount is None or not math.isfinite(amount) or amount < 0:
        raise InvalidInput("Amount must be zero or more; the type decides the sign")

    async with atomic(db):
        await get_worker(db, worker_id)
        entry = WorkerTransaction(
            worker_id=worker_id, type=type, amount=amount, date=on_date, description=description
        )
        db.add(entry)

    await db.refresh(entry)
    logger.info("Ledger entry %s added: worker=%s type=%s amount=%.2f", entry.id, worker_id, type, amount)
    return entry


async def delete_transaction(db: AsyncSession, transaction_id: int) -> None:
    async with atomic(db):
        result = await db.execute(select(WorkerTransaction).where(WorkerTransaction.id == transaction_id))
        entry = result.scalar_one_or_none()
        if entry is None:
            raise NotFound(f"Transaction {transaction_id} not found")
        await db.delete(entry)

    logger.info("Ledger entry %s deleted", transaction_id)


async def net_balance(db: AsyncSession, worker_id: int, month: Optional[str] = None) -> float:
    """salary + salary/bonus entries - deduction/payment entries, optionally for one month."""
    worker = await get_worker(db, worker_id)
    query = _month_filter(
        select(WorkerTransaction.type, func.sum(WorkerTransaction.amount))
        .where(WorkerTransaction.worker_id == worker_id),
        month,
    ).group_by(WorkerTransaction.type)

    balance = float(worker.salary or 0)
    for entry_type, total in (await db.execute(query)).all():
        if entry_type in CREDIT_TYPES:
            balance += float(total or 0)
        elif entry_type in DEBIT_TYPES:
            balance -= float(total or 0)
    return round(balance, 2)


async def account_statement(
    db: AsyncSession, worker_id: int, month: Optional[str] = None
) -> AccountStatementResponse:
    worker = await get_worker(db, worker_id)
    transactions = await list_transactions(db, worker_id, month)
    return AccountStatementResponse(
        worker_id=worker.id,
        worker_name=worker.name,
        salary=worker.salary,
        month=month,
        transactions=[TransactionResponse.model_validate(t) for t in transactions],
        net_balance=await net_balance(db, worker_id, month),
    )
