import numpy as np
import pytest
import torch
from pydantic import ValidationError

from core.shared.actions import Action
from core.shared.trade_outcome import TradeDecision, TradeOutcome


@pytest.mark.parametrize("raw, expected", [
    ("buy", Action.BUY),
    (" SELL ", Action.SELL),
    ("Hold", Action.HOLD),
    (0, Action.BUY),
    (1, Action.SELL),
    (Action.SELL, Action.SELL),
    ("short", Action.HOLD),
    (7, Action.HOLD),
    (True, Action.HOLD),
], ids=["lowercase", "padded upper", "mixed case", "tag 0", "tag 1", "enum", "unknown name", "unknown tag", "bool"])
def test_action_parse(raw, expected):
    assert Action.parse(raw) == expected


def test_decision_accepts_camel_case_wire_names():
    decision = TradeDecision.model_validate({
        "itemId": 4151,
        "action": "sell",
        "features": np.array([1, 2, 3]),
        "expectedReturn": 0.05,
        "riskScore": 55,
    })
    print(f"✅ ACTUAL: {decision}")
    assert decision.item_id == "4151"
    assert decision.action == Action.SELL
    assert decision.features == (1.0, 2.0, 3.0)
    assert decision.confidence == 0.5
    assert decision.risk_score == 55.0


def test_decision_features_from_tensor():
    decision = TradeDecision(item_id="a", action="buy", features=torch.tensor([[0.5, 1.5]]))
    assert decision.features == (0.5, 1.5)


@pytest.mark.parametrize("overrides", [
    {"item_id": "  "},
    {"item_id": None},
    {"action": None},
    {"features": None},
    {"features": "1,2,3"},
    {"features": {"f0": 1.0}},
    {"features": [1.0, "x"]},
    {"features": [1.0, float("inf")]},
    {"confidence": -0.1},
    {"confidence": float("nan")},
    {"risk_score": 101},
], ids=["blank id", "null id", "null action", "null features", "string features", "mapping features",
        "non-numeric feature", "infinite feature", "negative confidence", "nan confidence", "risk above 100"])
def test_decision_rejects_bad_payload(overrides):
    payload = {"item_id": "a", "action": "buy", "features": [1.0], **overrides}
    with pytest.raises(ValidationError):
        TradeDecision(**payload)


def test_decision_is_immutable():
    decision = TradeDecision(item_id="a", action="buy", features=[1.0])
    with pytest.raises(ValidationError):
        decision.confidence = 0.9


def test_outcome_defaults_and_aliases():
    outcome = TradeOutcome.model_validate({
        "actualProfit": -250,
        "tradeDuration": 60_000,
        "wasSuccessful": False,
        "tradeClosed": None,
        "newMarketState": [0.1, 0.2],
    })
    assert outcome.actual_profit == -250.0
    assert outcome.actual_return is None
    assert outcome.trade_duration == 60_000
    assert outcome.trade_closed is False
    assert outcome.new_market_state == (0.1, 0.2)


@pytest.mark.parametrize("payload", [
    {"tradeDuration": -1},
    {"actualProfit": float("nan")},
    {"newMarketState": [float("nan")]},
], ids=["negative duration", "nan profit", "nan market state"])
def test_outcome_rejects_bad_payload(payload):
    with pytest.raises(ValidationError):
        TradeOutcome.model_validate(payload)
