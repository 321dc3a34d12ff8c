from dataclasses import dataclass
from typing import Optional


@dataclass
class TriggerState:
    """Bookkeeping from the last update. Only the update coordinator writes it."""

    last_update_time: float
    buffer_size_at_last_update: int = 0
    total_experiences: int = 0


class TriggerPolicy:
    """
    Conjunctive gate deciding whether a model update is due.

    Stateless: the same inputs always give the same verdict, so it can be
    re-evaluated on every insertion and again under the update lock.
    """

    def __init__(self, config):
        self.config = config

    def reason_not_due(self, buffer_size: int, state: TriggerState, now: float) -> Optional[str]:
        """Returns None when an update is due, otherwise the first failing gate."""
        if not self.config.enable_online_learning:
            return "online learning disabled"

        if buffer_size < self.config.batch_size:
            return f"buffer has {buffer_size} experiences, needs {self.config.batch_size}"

        # Difference of buffer lengths; undercounts arrivals once eviction kicks in
        since_update = buffer_size - state.buffer_size_at_last_update
        if since_update < self.config.learning_frequency:
            return f"{since_update} experiences since last update, needs {self.config.learning_frequency}"

        elapsed = now - state.last_update_time
        if elapsed < self.config.update_cooldown_secs:
            return f"cooldown active ({elapsed:.1f}s of {self.config.update_cooldown_secs:.1f}s)"

        return None

    def is_due(self, buffer_size: int, state: TriggerState, now: float) -> bool:
        return self.reason_not_due(buffer_size, state, now) is None
