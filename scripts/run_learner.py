import os
import sys
import argparse

# CLI args
parser = argparse.ArgumentParser()
parser.add_argument("--mode", choices=["dry", "live"], required=True, help="Mode: dry (synthetic outcomes) or live (consume outcomes from Redis)")
parser.add_argument("--config", default="configs/learning/config.yaml", help="Path to the learning config YAML")
args = parser.parse_args()

# Setup import path
sys.path.append(os.path.abspath("src"))

from learning.runner import LearningRunner


if __name__ == "__main__":
    result = LearningRunner(mode=args.mode, config_path=args.config).run()
    if result is not None:
        print(f"📉 Update result: {result.model_dump()}")
