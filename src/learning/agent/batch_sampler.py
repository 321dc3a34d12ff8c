import math
import random

from learning.agent.replay_buffer import ExperienceBuffer


class BatchSampler:
    """
    Recency-biased batch: the newest `recent_fraction` of the batch (rounded
    down) is the tail of the buffer, the rest is drawn uniformly with
    replacement from the whole buffer. Random draws may repeat each other or
    land inside the recent slice.
    """

    def __init__(self, recent_fraction=0.8, rng=None):
        if not 0.0 <= recent_fraction <= 1.0:
            raise ValueError(f"❌ recent_fraction must be within [0, 1], got {recent_fraction}")
        self.recent_fraction = recent_fraction
        self.rng = rng or random.Random()

    def sample(self, buffer, batch_size: int):
        experiences = buffer.snapshot() if isinstance(buffer, ExperienceBuffer) else tuple(buffer)
        size = min(batch_size, len(experiences))
        if size <= 0:
            return []

        recent_count = math.floor(size * self.recent_fraction)
        random_count = size - recent_count

        batch = list(experiences[len(experiences) - recent_count:]) if recent_count else []
        batch.extend(experiences[self.rng.randrange(len(experiences))] for _ in range(random_count))
        return batch
