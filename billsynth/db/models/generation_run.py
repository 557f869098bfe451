import enum
from sqlalchemy import Column, Integer, String, DateTime, Enum, Float, JSON, Index
from sqlalchemy.sql import func
from billsynth.db.session import Base

class RunMode(str, enum.Enum):
    UPI = "UPI"
    CASH = "CASH"

class GenerationRun(Base):
    __tablename__ = "generation_runs"
    __table_args__ = (
        Index("idx_generation_runs_report", "created_at", "mode", "status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    run_id = Column(String, unique=True, index=True, nullable=False)
    mode = Column(Enum(RunMode), nullable=False, index=True)
    status = Column(String, nullable=False, index=True)
    message = Column(String, nullable=True)

    seed = Column(Integer, nullable=True)
    bill_count = Column(Integer, nullable=False, default=0)
    total_billed = Column(Float, nullable=False, default=0.0)
    opening_stock_value = Column(Float, nullable=False, default=0.0)
    closing_stock_value = Column(Float, nullable=False, default=0.0)

    bill_rows = Column(JSON, nullable=False)
    stock_rows = Column(JSON, nullable=False)
    skip_log = Column(JSON, nullable=False)

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self):
        return (
            f"<GenerationRun(id={self.run_id}, mode={self.mode}, "
            f"bills={self.bill_count}, status={self.status})>"
        )
