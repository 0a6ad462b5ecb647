from pydantic import BaseModel, Field
from datetime import date, datetime, time
from typing import Optional, List


class AttendanceUpsert(BaseModel):
    worker_id: int
    date: date
    status: str  # present, absent, vacation, sick
    check_in: Optional[time] = None
    check_out: Optional[time] = None
    notes: Optional[str] = None


class AttendanceResponse(BaseModel):
    id: int
    worker_id: int
    date: date
    status: str
    check_in: Optional[time]
    check_out: Optional[time]
    notes: Optional[str]

    model_config = {"from_attributes": True}


class AttendanceUpsertResponse(BaseModel):
    attendance: AttendanceResponse
    ledger_action: str  # "created", "removed" or "unchanged"


class TransactionCreate(BaseModel):
    type: str  # salary, bonus, deduction, payment
    amount: float
    date: date
    description: Optional[str] = Field(None, max_length=500)


class TransactionResponse(BaseModel):
    id: int
    worker_id: int
    type: str
    amount: float
    date: date
    description: Optional[str]
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class AccountStatementResponse(BaseModel):
    worker_id: int
    worker_name: str
    salary: Optional[float]
    month: Optional[str]
    transactions: List[TransactionResponse]
    net_balance: float
