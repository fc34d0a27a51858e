from sqlalchemy import (
    Column,
    String,
    Integer,
    Float,
    ForeignKey,
    CheckConstraint,
    Index,
)
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class Run(BaseModel, Base):
    __tablename__ = "runs"

    # Owner; runs go away with their account
    account_id = Column(String(36), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False)
    pace = Column(Float, nullable=True)
    time = Column(String(32), nullable=True)  # free-form duration, e.g. "00:31:12"
    distance = Column(Float, nullable=True)
    lap = Column(Integer, nullable=True)
    incline = Column(Float, nullable=True)

    account = relationship("Account", back_populates="runs")

    __table_args__ = (
        CheckConstraint("(pace IS NULL) OR (pace >= 0)", name="ck_runs_pace_nonnegative"),
        CheckConstraint("(distance IS NULL) OR (distance >= 0)", name="ck_runs_distance_nonnegative"),
        CheckConstraint("(lap IS NULL) OR (lap >= 0)", name="ck_runs_lap_nonnegative"),
        Index("ix_runs_account_created", "account_id", "created_at"),
    )
