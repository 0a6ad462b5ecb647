from sqlalchemy import Column, Integer, Float, Date, ForeignKey, UniqueConstraint
from app.database import Base


class DailyEvaluation(Base):
    __tablename__ = "daily_evaluations"

    id = Column(Integer, primary_key=True, index=True)
    worker_id = Column(Integer, ForeignKey("workers.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False, index=True)
    total_score = Column(Float, nullable=False)  # sum of entry scores, never hand-entered

    __table_args__ = (
        UniqueConstraint("worker_id", "date", name="uq_evaluation_worker_date"),
    )


class TaskEntry(Base):
    __tablename__ = "task_entries"

    id = Column(Integer, primary_key=True, index=True)
    evaluation_id = Column(
        Integer, ForeignKey("daily_evaluations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False)
    quantity = Column(Integer, nullable=False)
    score = Column(Float, nullable=False)  # 100 * quantity / target at write time
