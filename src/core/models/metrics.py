# src/core/models/metrics.py

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class UpdateResult(BaseModel):
    updated: bool
    reason: Optional[str] = None
    batch_size: int = 0
    loss: Optional[float] = None
    average_reward: Optional[float] = None
    model_version: Optional[str] = None
    update_time: Optional[datetime] = None

    @classmethod
    def skipped(cls, reason: str) -> "UpdateResult":
        return cls(updated=False, reason=reason)


class LearningMetrics(BaseModel):
    total_updates: int = 0
    average_loss: float = 0.0
    average_reward: float = 0.0
    last_update_time: Optional[datetime] = None
    last_model_version: Optional[str] = None
    last_batch_size: int = 0
