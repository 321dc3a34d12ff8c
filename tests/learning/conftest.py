import random

import pytest

from core.models.learning_config import LearningConfig
from learning.agent.online_learner import OnlineLearner


@pytest.fixture
def config():
    return LearningConfig(batch_size=32, learning_frequency=10, update_cooldown_secs=300, max_memory_size=1000)


@pytest.fixture
def learner(model, config, clock):
    return OnlineLearner(model, config=config, clock=clock, rng=random.Random(7))


@pytest.fixture
def fill(make_pair):
    def _fill(learner, count, start=0, dim=3):
        for seq in range(start, start + count):
            learner.record_outcome(*make_pair(seq, dim=dim))
    return _fill
