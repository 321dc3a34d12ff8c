import pytest

from core.models.learning_config import LearningConfig
from learning.agent.trigger_policy import TriggerPolicy, TriggerState


@pytest.fixture
def policy():
    return TriggerPolicy(LearningConfig(batch_size=32, learning_frequency=10, update_cooldown_secs=300))


def test_due_when_every_gate_holds(policy):
    state = TriggerState(last_update_time=0.0, buffer_size_at_last_update=20)
    assert policy.is_due(buffer_size=32, state=state, now=300.0)
    assert policy.reason_not_due(32, state, 300.0) is None


@pytest.mark.parametrize("buffer_size, size_at_last, now, expected", [
    (31, 0, 1_000.0, "buffer has 31"),
    (40, 31, 1_000.0, "9 experiences since last update"),
    (40, 0, 299.9, "cooldown active"),
], ids=["buffer below batch size", "too few new experiences", "cooldown not elapsed"])
def test_any_failing_gate_suppresses_trigger(policy, buffer_size, size_at_last, now, expected):
    print(f"🧪 TEST: trigger suppressed -> {expected}")
    state = TriggerState(last_update_time=0.0, buffer_size_at_last_update=size_at_last)
    reason = policy.reason_not_due(buffer_size, state, now)
    assert reason is not None and expected in reason
    assert not policy.is_due(buffer_size, state, now)


def test_disabled_learning_blocks_everything():
    config = LearningConfig(enable_online_learning=False)
    policy = TriggerPolicy(config)
    state = TriggerState(last_update_time=0.0)
    assert policy.reason_not_due(10_000, state, 1e9) == "online learning disabled"

    config.enable_online_learning = True
    assert policy.is_due(10_000, state, 1e9)


def test_evaluation_is_idempotent(policy):
    state = TriggerState(last_update_time=0.0)
    verdicts = {policy.is_due(50, state, 500.0) for _ in range(5)}
    assert verdicts == {True}
    assert state == TriggerState(last_update_time=0.0)


def test_saturated_buffer_never_counts_new_arrivals():
    # Once full, length stops growing, so the difference stays at zero
    policy = TriggerPolicy(LearningConfig(batch_size=4, learning_frequency=2, update_cooldown_secs=0))
    state = TriggerState(last_update_time=0.0, buffer_size_at_last_update=100)
    assert "0 experiences since last update" in policy.reason_not_due(100, state, 10.0)
