import numpy as np

from core.utils.type_safe import safe_float

REWARD_MIN = -10.0
REWARD_MAX = 10.0


class RewardCalculator:
    """
    Shapes a decision/outcome pair into one scalar in [-10, 10].

    Terms are additive and independently optional: an outcome field that was
    not reported contributes nothing rather than failing the calculation.
    """

    profit_scale = 1_000_000.0
    profit_weight = 10.0
    accuracy_weight = 2.0
    time_reference_ms = 24 * 60 * 60 * 1000
    time_weight = 0.5
    risk_threshold = 60.0
    risk_span = 40.0
    risk_weight = 2.0

    def compute_profit_component(self, outcome):
        if outcome.actual_profit is None:
            return 0.0
        return safe_float(np.tanh(outcome.actual_profit / self.profit_scale)) * self.profit_weight

    def compute_accuracy_component(self, decision, outcome):
        if outcome.actual_return is None or decision.expected_return is None:
            return 0.0
        error = abs(outcome.actual_return - decision.expected_return)
        return max(0.0, 1.0 - error) * self.accuracy_weight

    def compute_time_component(self, outcome):
        if outcome.trade_duration is None:
            return 0.0
        return max(0.0, 1.0 - outcome.trade_duration / self.time_reference_ms) * self.time_weight

    def compute_risk_penalty(self, decision, outcome):
        if outcome.actual_profit is None or outcome.actual_profit >= 0:
            return 0.0
        if decision.risk_score is None or decision.risk_score <= self.risk_threshold:
            return 0.0
        return (decision.risk_score - self.risk_threshold) / self.risk_span * self.risk_weight

    def compute_calibration_component(self, decision, outcome):
        if outcome.was_successful is None:
            return 0.0
        return decision.confidence if outcome.was_successful else 1.0 - decision.confidence

    def compute_total_reward(self, decision, outcome, track_metrics=False):
        profit_r = self.compute_profit_component(outcome)
        accuracy_r = self.compute_accuracy_component(decision, outcome)
        time_r = self.compute_time_component(outcome)
        risk_p = self.compute_risk_penalty(decision, outcome)
        calibration_r = self.compute_calibration_component(decision, outcome)

        raw = profit_r + accuracy_r + time_r - risk_p + calibration_r
        reward = float(np.clip(raw, REWARD_MIN, REWARD_MAX))

        if not track_metrics:
            return reward

        metrics = {
            "reward": reward,
            "raw_reward": raw,
            "profit_component": profit_r,
            "accuracy_component": accuracy_r,
            "time_component": time_r,
            "risk_penalty": risk_p,
            "calibration_component": calibration_r,
        }
        return reward, metrics
