import threading
from pathlib import Path

import pytest

from core.shared.actions import Action
from learning.agent.experience import Experience, ExperienceMetadata


class FakeClock:
    def __init__(self, start=1_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class RecordingModel:
    """train() contract stub that remembers every batch and the thread that trained it."""

    input_dim = 3

    def __init__(self, loss=0.25, version="v-test", failures=0):
        self.loss = loss
        self.version = version
        self.failures = failures
        self.batches = []
        self.threads = []
        self.trained = threading.Event()
        self._lock = threading.Lock()

    def train(self, batch):
        with self._lock:
            self.batches.append(batch)
            self.threads.append(threading.current_thread())
            if self.failures > 0:
                self.failures -= 1
                raise ConnectionError("model service unavailable")
        self.trained.set()
        return {"loss": self.loss, "version": self.version}

    @property
    def call_count(self):
        return len(self.batches)


class BlockingModel(RecordingModel):
    """Holds train() open until `release` is set."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.entered = threading.Event()
        self.release = threading.Event()

    def train(self, batch):
        self.entered.set()
        assert self.release.wait(timeout=5), "test never released the model"
        return super().train(batch)


@pytest.fixture(scope="session")
def repo_root():
    return Path(__file__).resolve().parents[1]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def recording_model():
    return RecordingModel


@pytest.fixture
def model():
    return RecordingModel()


@pytest.fixture
def blocking_model():
    model = BlockingModel()
    yield model
    model.release.set()


@pytest.fixture
def make_experience():
    def _make(seq, reward=0.0, dim=3):
        state = tuple(float(seq) for _ in range(dim))
        return Experience(
            state=state,
            action=Action.HOLD,
            reward=reward,
            next_state=state,
            done=False,
            metadata=ExperienceMetadata(
                timestamp=float(seq),
                item_id=str(seq),
                expected_return=None,
                actual_return=None,
                confidence=0.5,
            ),
        )
    return _make


@pytest.fixture
def make_pair():
    def _make(seq, dim=3, **outcome):
        decision = {
            "itemId": f"item-{seq}",
            "action": "buy",
            "features": [float(seq)] * dim,
            "confidence": 0.6,
            "expectedReturn": 0.1,
            "riskScore": 40,
        }
        return decision, {"actualProfit": 1_000.0, "actualReturn": 0.1, **outcome}
    return _make
