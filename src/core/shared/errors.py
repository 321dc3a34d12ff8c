class InvalidExperienceError(ValueError):
    """Decision/outcome payload rejected before it reaches the buffer."""


class ModelUpdateError(RuntimeError):
    """The model's train() call raised or answered with an unusable response."""

    def __init__(self, message, batch_size=0, model_version=None):
        super().__init__(message)
        self.batch_size = batch_size
        self.model_version = model_version
