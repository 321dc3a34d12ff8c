import threading
from collections import deque
from typing import Tuple

from core.decorators.decorators import inject_logger
from learning.agent.experience import Experience


@inject_logger()
class ExperienceBuffer:
    """
    Bounded, insertion-ordered store of experiences with pure FIFO eviction.

    All membership changes and reads go through one lock, so appends from
    many reporting threads never interleave with a snapshot or a clear.
    """

    def __init__(self, max_size=10_000):
        """
        Args:
            max_size (int): Capacity; once reached, each append evicts the oldest experience.
        """
        if max_size < 1:
            raise ValueError(f"❌ ExperienceBuffer capacity must be positive, got {max_size}")
        self.max_size = max_size
        self._buffer = deque()
        self._lock = threading.Lock()
        self._total_recorded = 0

    def record(self, experience: Experience) -> int:
        """
        Appends at the tail, then evicts from the head until the buffer is back
        within capacity. Returns the number of experiences evicted.
        """
        if not isinstance(experience, Experience):
            raise TypeError(f"❌ ExperienceBuffer only stores Experience, got {type(experience).__name__}")
        with self._lock:
            self._buffer.append(experience)
            self._total_recorded += 1
            evicted = 0
            while len(self._buffer) > self.max_size:
                self._buffer.popleft()
                evicted += 1
        if evicted:
            self.logger.debug(f"♻️ Evicted {evicted} oldest experience(s), capacity={self.max_size}")
        return evicted

    def size(self) -> int:
        with self._lock:
            return len(self._buffer)

    def __len__(self):
        return self.size()

    @property
    def total_recorded(self) -> int:
        with self._lock:
            return self._total_recorded

    def snapshot(self) -> Tuple[Experience, ...]:
        """
        Oldest-first immutable copy of the current contents. Experiences are
        frozen, so sharing them does not expose live buffer state.
        """
        with self._lock:
            return tuple(self._buffer)

    def clear(self) -> int:
        with self._lock:
            removed = len(self._buffer)
            self._buffer.clear()
        return removed

    def get_stats(self):
        experiences = self.snapshot()
        stats = {
            "size": len(experiences),
            "max_size": self.max_size,
            "utilization_pct": round(len(experiences) / self.max_size * 100.0, 2),
            "total_recorded": self.total_recorded,
            "avg_reward": 0.0,
            "reward_min": 0.0,
            "reward_max": 0.0,
        }
        if experiences:
            rewards = [e.reward for e in experiences]
            stats["avg_reward"] = sum(rewards) / len(rewards)
            stats["reward_min"] = min(rewards)
            stats["reward_max"] = max(rewards)
        return stats
