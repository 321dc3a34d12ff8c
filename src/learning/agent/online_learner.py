import threading
import time
from datetime import datetime, timezone

from pydantic import ValidationError

from core.decorators.decorators import inject_logger
from core.models.learning_config import LearningConfig
from core.models.metrics import UpdateResult
from core.reward.reward_calculator import RewardCalculator
from core.shared.errors import InvalidExperienceError, ModelUpdateError
from core.shared.trade_outcome import TradeDecision, TradeOutcome
from learning.agent.batch_sampler import BatchSampler
from learning.agent.experience import Experience
from learning.agent.metrics_tracker import MetricsTracker
from learning.agent.replay_buffer import ExperienceBuffer
from learning.agent.trigger_policy import TriggerPolicy
from learning.agent.update_coordinator import ModelUpdateCoordinator


@inject_logger()
class OnlineLearner:
    """
    Turns reported decision/outcome pairs into experiences and periodically
    trains the injected model on a recency-biased batch of them.

    One instance is built by the host process and shared with every reporter;
    it holds the buffer, trigger state and metrics as its own fields.

    Usage::

        learner = OnlineLearner(model, config=LearningConfig(batch_size=32))
        learner.record_outcome(decision, outcome)
        status = learner.get_status()
    """

    log_level = "INFO"

    def __init__(self, model, config=None, clock=time.time, rng=None, reward_calculator=None, on_update=None,
                 state_dim=None):
        """
        Args:
            model: Anything with `train(batch) -> {"loss": float, "version": str?}`.
            config (LearningConfig | dict | None): Learning tunables; dicts are validated.
            state_dim (int | None): Required width of `features` and `newMarketState`.
                None accepts any width.
            clock (callable): Wall-clock seconds source, injectable for tests.
            rng (random.Random | None): Source for the random part of each batch.
            reward_calculator (RewardCalculator | None): Reward shaping override.
            on_update (callable | None): Called with each successful UpdateResult.
        """
        if config is None:
            config = LearningConfig()
        elif not isinstance(config, LearningConfig):
            config = LearningConfig.model_validate(config)

        self.config = config
        self.model = model
        self.state_dim = state_dim
        self.clock = clock
        self.reward_calculator = reward_calculator or RewardCalculator()
        self.buffer = ExperienceBuffer(max_size=config.max_memory_size)
        self.metrics = MetricsTracker()
        self.policy = TriggerPolicy(config)
        self.sampler = BatchSampler(recent_fraction=config.recent_fraction, rng=rng)
        self.coordinator = ModelUpdateCoordinator(
            model=model,
            buffer=self.buffer,
            policy=self.policy,
            sampler=self.sampler,
            metrics=self.metrics,
            config=config,
            clock=clock,
            on_update=on_update,
        )
        self._worker = None
        self._worker_lock = threading.Lock()
        self.logger.info(f"📚 OnlineLearner initialized | state_dim={state_dim} | config={config.to_dict()}")

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def record_outcome(self, decision, outcome) -> Experience:
        """
        Record one decision and its realized outcome.

        Raises InvalidExperienceError when either payload fails validation;
        nothing is stored in that case. Model failures from an update started
        here are logged, never raised.
        """
        decision, outcome = self._validate(decision, outcome)

        reward = self.reward_calculator.compute_total_reward(decision, outcome)
        experience = Experience.from_trade(decision, outcome, reward, timestamp=self.clock())
        self.buffer.record(experience)

        self.logger.debug(
            f"📝 Recorded outcome | item={decision.item_id} | action={decision.action.name} | "
            f"reward={reward:.4f} | memory={self.buffer.size()}"
        )

        if self.coordinator.check() is None:
            self._dispatch_update()
        return experience

    def _validate(self, decision, outcome):
        try:
            if not isinstance(decision, TradeDecision):
                decision = TradeDecision.model_validate(decision)
            if not isinstance(outcome, TradeOutcome):
                outcome = TradeOutcome.model_validate(outcome or {})
        except ValidationError as e:
            self.logger.warning(f"⚠️ Rejected trade outcome: {e.errors(include_url=False)}")
            raise InvalidExperienceError(f"invalid decision/outcome payload: {e}") from e

        if self.state_dim is not None:
            self._check_width("features", decision.features)
            if outcome.new_market_state is not None:
                self._check_width("newMarketState", outcome.new_market_state)
        return decision, outcome

    def _check_width(self, name, vector):
        if len(vector) != self.state_dim:
            self.logger.warning(f"⚠️ Rejected trade outcome: {name} has {len(vector)} values, expected {self.state_dim}")
            raise InvalidExperienceError(f"{name} has {len(vector)} values, expected {self.state_dim}")

    def _dispatch_update(self):
        if not self.config.background_updates:
            self._update_from_record()
            return

        # At most one background worker at a time
        with self._worker_lock:
            if self._worker is not None and self._worker.is_alive():
                self.logger.debug("⏸️ Background update already running")
                return
            self._worker = threading.Thread(target=self._update_from_record, name="online-learner-update", daemon=True)
            self._worker.start()

    def _update_from_record(self):
        try:
            self.coordinator.trigger_update(blocking=False)
        except ModelUpdateError:
            self.logger.exception("💥 Automatic model update failed; will retry on a later insertion")

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------

    def trigger_update(self) -> UpdateResult:
        """Manual trigger. Waits for any in-flight update, then re-checks the gates."""
        return self.coordinator.trigger_update(blocking=True)

    def force_update(self) -> UpdateResult:
        """Runs an update regardless of cooldown and frequency; needs a non-empty buffer."""
        return self.coordinator.trigger_update(blocking=True, force=True)

    def set_learning_enabled(self, enabled: bool):
        self.config.enable_online_learning = bool(enabled)
        self.logger.info(f"🎛️ Online learning {'enabled' if enabled else 'disabled'}")

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    def clear_memory(self) -> int:
        removed = self.buffer.clear()
        self.logger.info(f"🧹 Cleared learning memory ({removed} experiences)")
        return removed

    def export_snapshot(self):
        return {
            "experiences": [e.to_dict() for e in self.buffer.snapshot()],
            "metrics": self.metrics.export(),
            "configuration": self.config.to_dict(),
            "export_timestamp": datetime.now(timezone.utc).isoformat(),
        }

    def get_status(self):
        reason = self.coordinator.check()
        state = self.coordinator.state
        return {
            "buffer": self.buffer.get_stats(),
            "trigger": {
                "due": reason is None,
                "reason": reason,
                "last_update_time": state.last_update_time,
                "buffer_size_at_last_update": state.buffer_size_at_last_update,
                "total_experiences": state.total_experiences,
                "update_in_progress": self.coordinator.is_updating(),
            },
            "metrics": self.metrics.export(),
        }
