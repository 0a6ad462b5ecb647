import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.core.auth import get_current_caller
from app.schemas.ledger import AttendanceUpsert, AttendanceResponse, AttendanceUpsertResponse
from app.services import ledger

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/attendance", tags=["attendance"])


@router.post("", response_model=AttendanceUpsertResponse)
async def upsert_attendance(
    attendance_in: AttendanceUpsert,
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(get_current_caller)
):
    logger.info("Caller %s records attendance: worker=%s date=%s status=%s",
                caller, attendance_in.worker_id, attendance_in.date, attendance_in.status)
    record, action = await ledger.upsert_attendance(
        db,
        attendance_in.worker_id,
        attendance_in.date,
        attendance_in.status,
        check_in=attendance_in.check_in,
        check_out=attendance_in.check_out,
        notes=attendance_in.notes,
    )
    return AttendanceUpsertResponse(
        attendance=AttendanceResponse.model_validate(record),
        ledger_action=action,
    )


@router.get("", response_model=list[AttendanceResponse])
async def list_attendance(
    date: Optional[date] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    worker_id: Optional[int] = None,
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(get_current_caller)
):
    # `date` for a single day, or start_date/end_date (inclusive) for a sheet
    return await ledger.list_attendance(
        db, on_date=date, start_date=start_date, end_date=end_date, worker_id=worker_id
    )
