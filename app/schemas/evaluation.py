from pydantic import BaseModel, Field
from datetime import date
from typing import Optional, List


class EntryIn(BaseModel):
    task_id: int
    quantity: int  # validated by the store so every caller gets the same error


class EvaluationCreate(BaseModel):
    worker_id: int
    date: date
    entries: List[EntryIn] = Field(default_factory=list)


class EvaluationUpdate(BaseModel):
    entries: List[EntryIn] = Field(default_factory=list)


class EvaluationSaved(BaseModel):
    evaluation_id: int
    total_score: float


class EvaluationResponse(BaseModel):
    id: int
    worker_id: int
    worker_name: str
    date: date
    total_score: float


class TaskEntryResponse(BaseModel):
    id: int
    evaluation_id: int
    task_id: int
    task_name: str
    target_quantity: int
    quantity: int
    score: float


class EvaluationDetailResponse(EvaluationResponse):
    entries: List[TaskEntryResponse]


class MonthlyReportItem(BaseModel):
    worker_id: int
    worker_name: str
    days_worked: int
    average_score: Optional[float] = None


class ScoreMigrationResult(BaseModel):
    evaluations_scanned: int
    evaluations_updated: int
    entries_updated: int
    legacy_totals_found: int  # totals that matched the old average formula, not the sum
