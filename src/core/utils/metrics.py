import json
from datetime import datetime, timezone


def push_update_metric_to_redis(redis_conn, step, result, symbol="default", max_len=100):
    """
    Push one model-update record into Redis and keep only the latest `max_len` entries.

    Args:
        redis_conn: Redis connection object
        step (int): Number of successful updates so far
        result (UpdateResult): Outcome of the update
        symbol (str): Namespace for the metrics key
        max_len (int): Max number of metrics to retain in Redis
    """
    key = f"metrics:learning:{symbol.lower()}"
    metric = {
        "step": step,
        "loss": result.loss,
        "average_reward": result.average_reward,
        "batch_size": result.batch_size,
        "model_version": result.model_version,
        "timestamp": (result.update_time or datetime.now(timezone.utc)).isoformat(),
    }
    redis_conn.lpush(key, json.dumps(metric))
    redis_conn.ltrim(key, 0, max_len - 1)
    return key
