import numpy as np


def sanitize_state(state) -> bool:
    """
    Validates that a feature vector:
    - Is a flat sequence
    - Has no NaNs or Infs

    Returns:
        bool: True if state is clean, False otherwise
    """
    if not isinstance(state, (tuple, list)):
        return False
    if len(state) == 0:
        return True
    return bool(np.all(np.isfinite(np.asarray(state, dtype=np.float64))))
