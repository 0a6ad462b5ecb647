from sqlalchemy import Column, Integer, String, CheckConstraint
from app.database import Base


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, unique=True)
    target_quantity = Column(Integer, nullable=False)  # units expected per day

    __table_args__ = (
        CheckConstraint("target_quantity > 0", name="ck_tasks_target_positive"),
    )
