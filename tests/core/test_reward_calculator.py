import math
import random

import pytest

from core.reward.reward_calculator import REWARD_MAX, REWARD_MIN, RewardCalculator
from core.shared.trade_outcome import TradeDecision, TradeOutcome


@pytest.fixture
def calc():
    return RewardCalculator()


def decision(**kwargs):
    return TradeDecision(**{"item_id": "4151", "action": "buy", "features": [0.0], **kwargs})


def test_profit_component_saturates_with_tanh(calc):
    print("🧪 TEST: profit of 1e6 -> tanh(1) * 10")
    assert calc.compute_profit_component(TradeOutcome(actual_profit=1_000_000)) == pytest.approx(10 * math.tanh(1.0))
    assert calc.compute_profit_component(TradeOutcome(actual_profit=-1_000_000)) == pytest.approx(-10 * math.tanh(1.0))
    assert calc.compute_profit_component(TradeOutcome()) == 0.0


@pytest.mark.parametrize("expected, actual, reward", [
    (0.1, 0.3, 1.6),
    (0.1, 0.1, 2.0),
    (0.0, 2.5, 0.0),
    (None, 0.3, 0.0),
    (0.1, None, 0.0),
], ids=["close prediction", "exact prediction", "error above one floors at zero", "no expectation", "no actual"])
def test_accuracy_component(calc, expected, actual, reward):
    component = calc.compute_accuracy_component(decision(expected_return=expected), TradeOutcome(actual_return=actual))
    assert component == pytest.approx(reward)


@pytest.mark.parametrize("duration_ms, reward", [
    (12 * 60 * 60 * 1000, 0.25),
    (0, 0.5),
    (48 * 60 * 60 * 1000, 0.0),
    (None, 0.0),
], ids=["half a day", "instant trade", "over a day", "not reported"])
def test_time_component(calc, duration_ms, reward):
    assert calc.compute_time_component(TradeOutcome(trade_duration=duration_ms)) == pytest.approx(reward)


@pytest.mark.parametrize("risk, profit, penalty", [
    (80, -100.0, 1.0),
    (100, -1.0, 2.0),
    (60, -100.0, 0.0),
    (80, 100.0, 0.0),
    (None, -100.0, 0.0),
], ids=["high risk loss", "max risk loss", "at threshold", "high risk win", "no risk score"])
def test_risk_penalty(calc, risk, profit, penalty):
    assert calc.compute_risk_penalty(decision(risk_score=risk), TradeOutcome(actual_profit=profit)) == pytest.approx(penalty)


def test_calibration_component(calc):
    d = decision(confidence=0.7)
    assert calc.compute_calibration_component(d, TradeOutcome(was_successful=True)) == pytest.approx(0.7)
    assert calc.compute_calibration_component(d, TradeOutcome(was_successful=False)) == pytest.approx(0.3)
    assert calc.compute_calibration_component(d, TradeOutcome()) == 0.0


def test_total_reward_sums_components(calc):
    d = decision(expected_return=0.1, confidence=0.7, risk_score=80)
    o = TradeOutcome(actual_profit=500_000, actual_return=0.3, trade_duration=43_200_000, was_successful=True)

    reward, breakdown = calc.compute_total_reward(d, o, track_metrics=True)

    print(f"✅ ACTUAL: {breakdown}")
    assert reward == pytest.approx(10 * math.tanh(0.5) + 1.6 + 0.25 + 0.7)
    assert breakdown["risk_penalty"] == 0.0
    assert breakdown["raw_reward"] == pytest.approx(reward)


def test_total_reward_is_clamped(calc):
    best = calc.compute_total_reward(
        decision(expected_return=0.0, confidence=1.0),
        TradeOutcome(actual_profit=1e12, actual_return=0.0, trade_duration=0, was_successful=True),
    )
    worst = calc.compute_total_reward(
        decision(confidence=1.0, risk_score=100),
        TradeOutcome(actual_profit=-1e12, was_successful=False),
    )
    assert best == REWARD_MAX
    assert worst == REWARD_MIN


def test_empty_outcome_gives_zero_reward(calc):
    assert calc.compute_total_reward(decision(), TradeOutcome()) == 0.0


def test_reward_always_within_bounds(calc):
    rng = random.Random(42)
    for _ in range(500):
        d = decision(
            expected_return=rng.uniform(-5, 5),
            confidence=rng.random(),
            risk_score=rng.uniform(0, 100),
        )
        o = TradeOutcome(
            actual_profit=rng.uniform(-1e9, 1e9),
            actual_return=rng.uniform(-5, 5),
            trade_duration=rng.randint(0, 10 * 86_400_000),
            was_successful=rng.random() < 0.5,
        )
        assert REWARD_MIN <= calc.compute_total_reward(d, o) <= REWARD_MAX
