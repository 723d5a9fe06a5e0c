from datetime import datetime
from enum import Enum

from sqlalchemy import Float, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from healthlog.database import Base


class ActivityType(str, Enum):
    HEART_RATE = "heart_rate"
    CALORIES = "calories"
    STEPS = "steps"
    SLEEP = "sleep"
    STRESS = "stress"
    SPO2 = "spo2"
    RESTING_HEART_RATE = "resting_heart_rate"


class HealthLog(Base):
    __tablename__ = "health_logs"

    id: Mapped[int] = mapped_column(primary_key=True)
    activity_type: Mapped[str] = mapped_column(String(30), index=True)
    value: Mapped[float] = mapped_column(Float)
    unit: Mapped[str | None] = mapped_column(String(20), default=None)
    note: Mapped[str | None] = mapped_column(Text, default=None)
    # Stored as naive UTC
    occurred_at: Mapped[datetime] = mapped_column(index=True)

    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        default=datetime.utcnow, onupdate=datetime.utcnow
    )
