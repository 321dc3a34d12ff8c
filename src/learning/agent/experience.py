from dataclasses import asdict, dataclass
from typing import Optional, Tuple

from core.shared.actions import Action


@dataclass(frozen=True)
class ExperienceMetadata:
    """Audit trail for one experience. Never handed to the model."""

    timestamp: float
    item_id: str
    expected_return: Optional[float]
    actual_return: Optional[float]
    confidence: float


@dataclass(frozen=True)
class Experience:
    state: Tuple[float, ...]
    action: Action
    reward: float
    next_state: Tuple[float, ...]
    done: bool
    metadata: ExperienceMetadata

    @classmethod
    def from_trade(cls, decision, outcome, reward, timestamp):
        """
        Build an experience from validated TradeDecision/TradeOutcome models.
        Falls back to the decision features when the outcome carries no
        post-trade market state.
        """
        next_state = outcome.new_market_state if outcome.new_market_state is not None else decision.features
        return cls(
            state=decision.features,
            action=decision.action,
            reward=float(reward),
            next_state=next_state,
            done=bool(outcome.trade_closed),
            metadata=ExperienceMetadata(
                timestamp=timestamp,
                item_id=decision.item_id,
                expected_return=decision.expected_return,
                actual_return=outcome.actual_return,
                confidence=decision.confidence,
            ),
        )

    def to_dict(self):
        data = asdict(self)
        data["state"] = list(self.state)
        data["next_state"] = list(self.next_state)
        data["action"] = int(self.action)
        data["action_name"] = self.action.name
        return data
