# src/core/models/learning_config.py

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class LearningConfig(BaseModel):
    """Tunables for the online-learning feedback loop.

    Accepts snake_case keys from YAML and the camelCase keys used on the
    wire (`enableOnlineLearning`, `learningFrequency`, ...).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, validate_assignment=True)

    enable_online_learning: bool = True
    learning_frequency: int = Field(default=10, ge=1)
    # Reserved: carried through export, not enforced by the trigger
    performance_threshold: float = 0.6
    exploration_boost: bool = True
    batch_size: int = Field(default=32, ge=1)
    max_memory_size: int = Field(default=10_000, ge=1)
    update_cooldown_secs: float = Field(default=300.0, ge=0.0)
    recent_fraction: float = Field(default=0.8, ge=0.0, le=1.0)
    background_updates: bool = False

    def to_dict(self):
        return self.model_dump()
