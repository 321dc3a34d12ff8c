# learning/agent/__init__.py

from learning.agent.online_learner import OnlineLearner
from learning.agent.dqn_model import DQNModel

__all__ = ["OnlineLearner", "DQNModel"]
