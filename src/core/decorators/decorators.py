from functools import wraps
from loguru import logger as loguru_logger
import os
import sys

_sink_map = {}

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[source]}</cyan> | "
    "<blue>{function}</blue>:<yellow>{line}</yellow> - "
    "<level>{message}</level>"
)


def resolve_log_level(logger_name, class_level=None):
    """
    Level precedence: LOG_LEVEL_<NAME> env var, then the class `log_level`
    attribute, then APP_LOG_LEVEL, then WARNING.
    """
    default_level = os.getenv("APP_LOG_LEVEL", "WARNING")
    return os.getenv(f"LOG_LEVEL_{logger_name.upper()}", class_level or default_level).upper()


def inject_logger(name_attr="logger_name", level_attr="log_level"):
    """
    Class decorator that binds a loguru logger to `self.logger` before the
    wrapped __init__ runs. Each class name gets exactly one stderr sink,
    filtered on the bound `source` so levels can differ per class.
    """
    def decorator(cls):
        orig_init = cls.__init__

        @wraps(orig_init)
        def wrapped(self, *args, **kwargs):
            logger_name = getattr(self, name_attr, cls.__name__)
            log_level = resolve_log_level(logger_name, getattr(cls, level_attr, None))

            # Drop loguru's default handler the first time any class is wired
            if not _sink_map:
                loguru_logger.remove()

            if logger_name not in _sink_map:
                _sink_map[logger_name] = loguru_logger.add(
                    sys.stderr,
                    level=log_level,
                    filter=lambda record, source=logger_name: record["extra"].get("source") == source,
                    format=LOG_FORMAT,
                )

            self.logger = loguru_logger.bind(source=logger_name)
            orig_init(self, *args, **kwargs)

        cls.__init__ = wrapped
        return cls
    return decorator
