from sqlalchemy import Column, Integer, String, Text, Float, Date, DateTime, ForeignKey, func
from app.database import Base

CREDIT_TYPES = ("salary", "bonus")
DEBIT_TYPES = ("deduction", "payment")
TRANSACTION_TYPES = CREDIT_TYPES + DEBIT_TYPES


class WorkerTransaction(Base):
    __tablename__ = "worker_transactions"

    id = Column(Integer, primary_key=True, index=True)
    worker_id = Column(Integer, ForeignKey("workers.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String, nullable=False)  # salary, bonus, deduction, payment
    amount = Column(Float, nullable=False)  # always >= 0; sign comes from type
    date = Column(Date, nullable=False, index=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
