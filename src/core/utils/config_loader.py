from core.models.learning_config import LearningConfig
from core.utils.yaml_loader import load_yaml

DEFAULT_CONFIG_PATH = "configs/learning/config.yaml"


def load_config(env="default", path=DEFAULT_CONFIG_PATH):
    """
    Load configuration from a single YAML file and merge `default` with `env` section.

    Nested mappings (e.g. `learning`, `redis`) are merged one level deep so an
    environment section only has to list the keys it overrides.

    Args:
        env (str): Environment key to merge with default (e.g. "live" or "dry")
        path (str): Path to the config.yaml file

    Returns:
        dict: Final config dictionary with merged settings
    """
    raw = load_yaml(path)

    default_cfg = raw.get("default", {}) or {}
    env_cfg = raw.get(env, {}) if env != "default" else {}
    env_cfg = env_cfg or {}

    merged = dict(default_cfg)
    for key, value in env_cfg.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value
    return merged


def load_learning_config(env="default", path=DEFAULT_CONFIG_PATH):
    config = load_config(env=env, path=path)
    return LearningConfig.model_validate(config.get("learning", {}))
