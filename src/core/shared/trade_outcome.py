from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from core.shared.actions import Action
from core.utils.state_utils import sanitize_state
from core.utils.type_safe import to_feature_vector


def _vector(value):
    try:
        vector = to_feature_vector(value)
    except TypeError as e:
        raise ValueError(str(e)) from e
    if not sanitize_state(vector):
        raise ValueError("feature vector contains NaN or Inf")
    return vector


class TradeDecision(BaseModel):
    """What the decision model saw and chose at decision time."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True, allow_inf_nan=False)

    item_id: str
    action: Action
    features: Tuple[float, ...]
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    expected_return: Optional[float] = None
    risk_score: Optional[float] = Field(default=None, ge=0.0, le=100.0)

    @field_validator("item_id", mode="before")
    @classmethod
    def _item_id(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValueError("itemId is required")
        return str(value)

    @field_validator("action", mode="before")
    @classmethod
    def _action(cls, value):
        if value is None:
            raise ValueError("action is required")
        return Action.parse(value)

    @field_validator("features", mode="before")
    @classmethod
    def _features(cls, value):
        return _vector(value)


class TradeOutcome(BaseModel):
    """Realized result of a decision, as reported by the outcome tracker.

    Every field is optional; absent fields simply drop their reward term.
    `trade_duration` is in milliseconds.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True, allow_inf_nan=False)

    actual_profit: Optional[float] = None
    actual_return: Optional[float] = None
    trade_duration: Optional[int] = Field(default=None, ge=0)
    was_successful: Optional[bool] = None
    trade_closed: bool = False
    new_market_state: Optional[Tuple[float, ...]] = None

    @field_validator("trade_closed", mode="before")
    @classmethod
    def _trade_closed(cls, value):
        return False if value is None else value

    @field_validator("new_market_state", mode="before")
    @classmethod
    def _new_market_state(cls, value):
        return None if value is None else _vector(value)
