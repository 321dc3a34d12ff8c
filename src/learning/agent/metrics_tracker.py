import threading

from core.models.metrics import LearningMetrics, UpdateResult


class MetricsTracker:
    """Update history. Averages describe the latest batch only, not all time."""

    def __init__(self):
        self._metrics = LearningMetrics()
        self._lock = threading.Lock()

    def record(self, result: UpdateResult):
        if not result.updated:
            return
        with self._lock:
            self._metrics = self._metrics.model_copy(update={
                "total_updates": self._metrics.total_updates + 1,
                "average_loss": result.loss,
                "average_reward": result.average_reward,
                "last_update_time": result.update_time,
                "last_model_version": result.model_version,
                "last_batch_size": result.batch_size,
            })

    def current(self) -> LearningMetrics:
        with self._lock:
            return self._metrics.model_copy()

    def export(self):
        return self.current().model_dump()
