import torch
import numpy as np


def safe_float(val, default=0.0):
    """
    Convert tensor/numpy/scalar to float safely.
    Returns default if conversion fails or value is None.
    """
    if val is None:
        return default
    if isinstance(val, torch.Tensor):
        val = val.detach().cpu()
        return val.item() if val.numel() == 1 else float(val.mean().item())
    if isinstance(val, np.ndarray):
        return val.item() if val.size == 1 else float(np.mean(val))
    if isinstance(val, (int, float, np.number)):
        return float(val)
    try:
        return float(val)
    except (TypeError, ValueError):
        return default


def to_feature_vector(val):
    """
    Copy a tensor/ndarray/sequence of numbers into an immutable tuple of floats.

    Raises TypeError for scalars, strings, mappings and None; raises ValueError
    when an element cannot be read as a number.
    """
    if val is None:
        raise TypeError("feature vector is missing")
    if isinstance(val, torch.Tensor):
        val = val.detach().cpu().reshape(-1).tolist()
    elif isinstance(val, np.ndarray):
        val = val.reshape(-1).tolist()
    if isinstance(val, (str, bytes, dict)) or not hasattr(val, "__iter__"):
        raise TypeError(f"feature vector must be a sequence of numbers, got {type(val).__name__}")

    vector = []
    for v in val:
        if isinstance(v, bool) or not isinstance(v, (int, float, np.number)):
            raise ValueError(f"feature value {v!r} is not numeric")
        vector.append(float(v))
    return tuple(vector)
