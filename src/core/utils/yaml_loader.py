import os

import yaml


def load_yaml(path, required=True):
    """
    Read a YAML mapping. An empty file reads as {}.

    With required=False a missing file also reads as {} instead of raising.
    """
    path = str(path)
    if not os.path.exists(path):
        if not required:
            return {}
        raise FileNotFoundError(f"❌ YAML file not found: {path}")

    with open(path, "r") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"❌ Failed to parse YAML file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"❌ Expected a mapping at the top of {path}, got {type(data).__name__}")
    return data
