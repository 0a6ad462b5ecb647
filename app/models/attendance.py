from sqlalchemy import Column, Integer, String, Text, Date, Time, DateTime, ForeignKey, UniqueConstraint, func
from app.database import Base

ATTENDANCE_STATUSES = ("present", "absent", "vacation", "sick")


class AttendanceRecord(Base):
    __tablename__ = "attendance_records"

    id = Column(Integer, primary_key=True, index=True)
    worker_id = Column(Integer, ForeignKey("workers.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False, index=True)
    status = Column(String, nullable=False)  # present, absent, vacation, sick
    check_in = Column(Time, nullable=True)
    check_out = Column(Time, nullable=True)
    notes = Column(Text, nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("worker_id", "date", name="uq_attendance_worker_date"),
    )
