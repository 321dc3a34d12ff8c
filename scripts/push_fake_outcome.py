import argparse
import json
import os
import sys

import redis

sys.path.append(os.path.abspath("src"))

from learning.runner import synthetic_pair

parser = argparse.ArgumentParser()
parser.add_argument("--host", default="localhost")
parser.add_argument("--port", type=int, default=6379)
parser.add_argument("--key", default="outcome_queue")
parser.add_argument("--count", type=int, default=10)
parser.add_argument("--input-dim", type=int, default=8, help="Must match model.input_dim in configs/learning/config.yaml")
args = parser.parse_args()

r = redis.Redis(host=args.host, port=args.port, decode_responses=True)

for i in range(args.count):
    decision, outcome = synthetic_pair(i, args.input_dim)
    r.rpush(args.key, json.dumps({"decision": decision, "outcome": outcome}))

print(f"✅ Pushed {args.count} fake outcomes to Redis key: {args.key}")
