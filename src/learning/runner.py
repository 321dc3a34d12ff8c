# File: src/learning/runner.py

import argparse
import json
import random
import time

import redis

from core.decorators.decorators import inject_logger
from core.shared.actions import Action
from core.shared.errors import InvalidExperienceError, ModelUpdateError
from core.utils.config_loader import DEFAULT_CONFIG_PATH, load_config
from core.utils.metrics import push_update_metric_to_redis
from core.utils.yaml_loader import load_yaml
from learning.agent.dqn_model import DQNModel
from learning.agent.online_learner import OnlineLearner


@inject_logger()
class LearningRunner:
    """
    Hosts one OnlineLearner fed either from a Redis list of
    {"decision": {...}, "outcome": {...}} messages (live) or from synthetic
    pairs (dry).
    """

    log_level = "INFO"

    def __init__(self, mode: str, config_path=DEFAULT_CONFIG_PATH, redis_conn=None, model=None):
        self.mode = mode
        self.config = load_config(env=mode, path=config_path)
        self.symbol = self.config.get("symbol", "default")

        redis_cfg = self.config.get("redis", {})
        self.outcome_key = redis_cfg.get("outcome_key", "outcome_queue")
        self.metrics_max_len = redis_cfg.get("metrics_max_len", 100)
        self.poll_interval = self.config.get("poll_interval", 0.5)

        self.redis = redis_conn
        if self.redis is None and self.mode == "live":
            self.redis = self._init_redis(redis_cfg)

        self.model = model or DQNModel(config=self._model_config())
        self._restore_checkpoint()
        self.learner = OnlineLearner(
            self.model,
            config=self.config.get("learning", {}),
            state_dim=getattr(self.model, "input_dim", None),
            on_update=self._publish_metrics if self.redis is not None else None,
        )

    def _model_config(self):
        model_cfg = dict(self.config.get("model", {}))
        if "model_config" not in model_cfg:
            model_cfg["model_config"] = load_yaml(model_cfg.get("model_config_path", "configs/learning/model_config.yaml"))
        return model_cfg

    def _restore_checkpoint(self):
        has_checkpoint = getattr(self.model, "has_checkpoint", None)
        if has_checkpoint is None or not has_checkpoint():
            self.logger.info("🧪 No checkpoint found. Starting from fresh weights.")
            return
        self.model.load_checkpoint()
        self.logger.info(f"✅ Resumed model {self.model.version}")

    def _save_checkpoint(self):
        if getattr(self.model, "model_manager", None) is None:
            return None
        return self.model.save_checkpoint()

    def _init_redis(self, redis_cfg):
        return redis.Redis(
            host=redis_cfg.get("host", "localhost"),
            port=redis_cfg.get("port", 6379),
            db=redis_cfg.get("db", 0),
            decode_responses=True,
        )

    def _publish_metrics(self, result):
        step = self.learner.metrics.current().total_updates
        key = push_update_metric_to_redis(self.redis, step, result, symbol=self.symbol, max_len=self.metrics_max_len)
        self.logger.debug(f"📈 Published update metrics to {key}")

    def handle_message(self, raw):
        """Feed one queued message to the learner. Returns True when it was recorded."""
        try:
            message = json.loads(raw)
            self.learner.record_outcome(message["decision"], message.get("outcome") or {})
            return True
        except (json.JSONDecodeError, KeyError, TypeError, InvalidExperienceError) as e:
            self.logger.warning(f"⚠️ Skipping malformed outcome message: {e}")
            return False

    def run(self):
        return self.run_dry() if self.mode == "dry" else self.run_live()

    def run_dry(self):
        samples = self.config.get("dry_samples", 64)
        input_dim = self.model.input_dim
        self.logger.info(f"🚀 Starting dry run with {samples} synthetic outcomes...")

        for i in range(samples):
            self.learner.record_outcome(*synthetic_pair(i, input_dim))

        try:
            result = self.learner.force_update()
            self.logger.info(f"📉 Dry update result: {result.model_dump()}")
        except ModelUpdateError as e:
            self.logger.error(f"💥 Dry update failed: {e}")
            raise

        self._save_checkpoint()
        return result

    def run_live(self):
        self.logger.info(f"🚀 Starting live learner on Redis key '{self.outcome_key}'...")
        while True:
            try:
                raw = self.redis.lpop(self.outcome_key)
                if raw:
                    self.handle_message(raw)
                else:
                    time.sleep(self.poll_interval)
            except KeyboardInterrupt:
                self.logger.info("🛑 Graceful shutdown.")
                if self.learner.metrics.current().total_updates > 0:
                    self._save_checkpoint()
                else:
                    self.logger.debug("🛑 Skipping model save: no update this session.")
                break
            except redis.RedisError as e:
                self.logger.exception(f"💥 Redis error in learner loop: {e}")
                time.sleep(2)


def synthetic_pair(index, input_dim, rng=random):
    features = [rng.uniform(-1, 1) for _ in range(input_dim)]
    expected_return = rng.uniform(-0.2, 0.2)
    profit = rng.uniform(-500_000, 500_000)
    decision = {
        "itemId": f"item-{index}",
        "action": rng.choice([a.name for a in Action]),
        "features": features,
        "confidence": rng.random(),
        "expectedReturn": expected_return,
        "riskScore": rng.uniform(0, 100),
    }
    outcome = {
        "actualProfit": profit,
        "actualReturn": expected_return + rng.uniform(-0.1, 0.1),
        "tradeDuration": rng.randint(60_000, 2 * 86_400_000),
        "wasSuccessful": profit > 0,
        "tradeClosed": rng.random() < 0.5,
        "newMarketState": [rng.uniform(-1, 1) for _ in range(input_dim)],
    }
    return decision, outcome


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--mode", choices=["dry", "live"], required=True, help="Mode: dry (synthetic outcomes) or live (consume from Redis)")
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="Path to the learning config YAML")
    args = parser.parse_args()

    LearningRunner(mode=args.mode, config_path=args.config).run()
