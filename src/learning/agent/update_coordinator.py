import math
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Protocol, Tuple, runtime_checkable

from core.decorators.decorators import inject_logger
from core.models.metrics import UpdateResult
from core.shared.errors import ModelUpdateError
from learning.agent.trigger_policy import TriggerState


@dataclass(frozen=True)
class TrainingBatch:
    """Parallel, equal-length columns handed to the model's train()."""

    states: Tuple[Tuple[float, ...], ...]
    actions: Tuple[int, ...]
    rewards: Tuple[float, ...]
    next_states: Tuple[Tuple[float, ...], ...]
    dones: Tuple[bool, ...]

    @classmethod
    def from_experiences(cls, experiences):
        return cls(
            states=tuple(e.state for e in experiences),
            actions=tuple(int(e.action) for e in experiences),
            rewards=tuple(e.reward for e in experiences),
            next_states=tuple(e.next_state for e in experiences),
            dones=tuple(e.done for e in experiences),
        )

    def __len__(self):
        return len(self.rewards)

    @property
    def mean_reward(self) -> float:
        return sum(self.rewards) / len(self.rewards) if self.rewards else 0.0

    def to_payload(self):
        return {
            "states": [list(s) for s in self.states],
            "actions": list(self.actions),
            "rewards": list(self.rewards),
            "nextStates": [list(s) for s in self.next_states],
            "dones": list(self.dones),
        }


@dataclass(frozen=True)
class TrainingResponse:
    loss: float
    version: Optional[str] = None

    @classmethod
    def parse(cls, response: Any) -> "TrainingResponse":
        """
        Accepts a mapping or an object exposing `loss` (and optionally
        `version`). Raises ValueError when the loss is missing or not finite.
        """
        if isinstance(response, Mapping):
            loss, version = response.get("loss"), response.get("version")
        else:
            loss, version = getattr(response, "loss", None), getattr(response, "version", None)

        if isinstance(loss, bool) or not isinstance(loss, (int, float)):
            raise ValueError(f"training response has no numeric loss: {response!r}")
        if not math.isfinite(loss):
            raise ValueError(f"training response loss is not finite: {loss}")
        return cls(loss=float(loss), version=None if version is None else str(version))


@runtime_checkable
class TrainableModel(Protocol):
    def train(self, batch: TrainingBatch) -> Any:
        ...


@inject_logger()
class ModelUpdateCoordinator:
    """
    Owns the single update path: check trigger, sample, train, record.

    `_update_lock` serialises whole updates. It is separate from the buffer's
    own lock, so reporters keep appending while the model trains.
    """

    log_level = "INFO"

    def __init__(self, model, buffer, policy, sampler, metrics, config, clock, on_update=None):
        self.model = model
        self.buffer = buffer
        self.policy = policy
        self.sampler = sampler
        self.metrics = metrics
        self.config = config
        self.clock = clock
        self.on_update = on_update
        self.state = TriggerState(last_update_time=clock())
        self._update_lock = threading.Lock()

    def check(self) -> Optional[str]:
        return self.policy.reason_not_due(self.buffer.size(), self.state, self.clock())

    def is_updating(self) -> bool:
        return self._update_lock.locked()

    def trigger_update(self, blocking=True, force=False) -> UpdateResult:
        """
        Runs one update if the trigger is due.

        Args:
            blocking (bool): Wait for an in-flight update to finish. When False
                and an update is running, returns a skipped result immediately.
            force (bool): Skip the trigger gates; only a non-empty buffer is required.

        Raises:
            ModelUpdateError: the model failed; trigger state and buffer are untouched.
        """
        if not self._update_lock.acquire(blocking=blocking):
            return UpdateResult.skipped("update already in progress")
        try:
            if force:
                reason = None if self.buffer.size() > 0 else "buffer is empty"
            else:
                reason = self.check()
            if reason is not None:
                self.logger.debug(f"⏸️ Update skipped: {reason}")
                return UpdateResult.skipped(reason)
            return self._run_update()
        finally:
            self._update_lock.release()

    def _run_update(self) -> UpdateResult:
        experiences = self.sampler.sample(self.buffer, self.config.batch_size)
        batch = TrainingBatch.from_experiences(experiences)
        self.logger.info(f"🧠 Triggering model update | batch={len(batch)} | buffer={self.buffer.size()}")

        try:
            response = TrainingResponse.parse(self.model.train(batch))
        except Exception as ex:
            self.logger.error(
                f"💥 Model update failed | batch={len(batch)} | mean_reward={batch.mean_reward:.4f} | "
                f"updates_so_far={self.metrics.current().total_updates} | error={ex!r}"
            )
            raise ModelUpdateError(f"model update failed: {ex}", batch_size=len(batch)) from ex

        result = UpdateResult(
            updated=True,
            batch_size=len(batch),
            loss=response.loss,
            average_reward=batch.mean_reward,
            model_version=response.version or "unknown",
            update_time=datetime.now(timezone.utc),
        )
        self.metrics.record(result)

        self.state.last_update_time = self.clock()
        self.state.buffer_size_at_last_update = self.buffer.size()
        self.state.total_experiences = self.buffer.total_recorded

        self.logger.info(
            f"✅ Model update completed | batch={result.batch_size} | loss={result.loss:.6f} | "
            f"avg_reward={result.average_reward:.4f} | version={result.model_version}"
        )

        if self.on_update is not None:
            try:
                self.on_update(result)
            except Exception as ex:
                self.logger.warning(f"⚠️ Post-update hook failed: {ex}")
        return result
