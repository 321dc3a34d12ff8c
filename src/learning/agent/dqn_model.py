import threading

import torch
import torch.nn as nn
import torch.optim as optim

from core.decorators.decorators import inject_logger
from core.models.dynamic_qnetwork import DynamicQNetwork
from core.utils.model_manager import ModelManager


@inject_logger()
class DQNModel:
    """
    Local Q-learning model satisfying the `train(batch)` contract.

    Each call runs one TD step on the batch:
        target = r + gamma * max_a' Q_target(s', a') * (1 - done)
    and returns {"loss": float, "version": "<model_version>.<step>"}.
    """

    def __init__(self, config, model_manager=None):
        self.config = config
        self.device = torch.device("cuda" if torch.cuda.is_available() else "cpu")
        self.training_step = 0

        self.lr = self.config.get("lr", 0.001)
        self.gamma = self.config.get("gamma", 0.99)
        self.target_sync_interval = self.config.get("target_sync_interval", 10)
        self.model_version = self.config.get("model_version", "v1")
        self.checkpoint_every = self.config.get("checkpoint_every", 0)
        self.model_manager = model_manager
        if self.model_manager is None and self.config.get("model_dir"):
            self.model_manager = ModelManager(model_dir=self.config["model_dir"])

        self.model = self._build_model()
        self.target_model = self._build_model()
        self.target_model.load_state_dict(self.model.state_dict())
        self.target_model.eval()
        self.optimizer = optim.Adam(self.model.parameters(), lr=self.lr)
        self.loss_fn = nn.MSELoss()
        # Reentrant: train() checkpoints while holding it
        self._lock = threading.RLock()

    def _build_model(self):
        model_config = self.config.get("model_config")
        if not model_config:
            raise ValueError("❌ model_config not found in config.")
        selected_profile = self.config.get("model_profile") or model_config.get("architecture", {}).get("selected_profile", "balanced")
        model = DynamicQNetwork(model_config, profile=selected_profile, input_dim=self.config.get("input_dim")).to(self.device)
        self.logger.info(f"📦 Built Q-network | profile={selected_profile} | input_dim={model.input_dim}")
        return model

    @property
    def input_dim(self):
        return self.model.input_dim

    @property
    def version(self):
        return f"{self.model_version}.{self.training_step}"

    def _to_tensor(self, vectors):
        tensor = torch.tensor([list(v) for v in vectors], dtype=torch.float32, device=self.device)
        if tensor.dim() != 2 or tensor.shape[1] != self.input_dim:
            raise ValueError(f"❌ Invalid input dim: expected {self.input_dim}, got {tuple(tensor.shape)}")
        return tensor

    def train(self, batch):
        if len(batch) == 0:
            raise ValueError("❌ Cannot train on an empty batch.")

        with self._lock:
            states = self._to_tensor(batch.states)
            next_states = self._to_tensor(batch.next_states)
            actions = torch.tensor(batch.actions, dtype=torch.int64, device=self.device)
            rewards = torch.tensor(batch.rewards, dtype=torch.float32, device=self.device)
            dones = torch.tensor(batch.dones, dtype=torch.float32, device=self.device)

            self.model.train()
            q_values = self.model(states)["q_values"].gather(1, actions.unsqueeze(1)).squeeze(1)
            with torch.no_grad():
                next_q = self.target_model(next_states)["q_values"].max(1)[0]
                target_q = rewards + self.gamma * next_q * (1.0 - dones)

            loss = self.loss_fn(q_values, target_q)
            self.optimizer.zero_grad()
            loss.backward()
            self.optimizer.step()

            self.training_step += 1
            if self.training_step % self.target_sync_interval == 0:
                self.target_model.load_state_dict(self.model.state_dict())
                self.logger.debug(f"🎯 Target network synced at step {self.training_step}")

            loss_value = loss.item()
            self.logger.info(f"🧠 Step {self.training_step}: loss={loss_value:.6f}, batch={len(batch)}")

            if self.model_manager and self.checkpoint_every and self.training_step % self.checkpoint_every == 0:
                self.save_checkpoint()

            return {"loss": loss_value, "version": self.version}

    def predict(self, state):
        with self._lock, torch.no_grad():
            self.model.eval()
            q_values = self.model(self._to_tensor([state]))["q_values"][0]
        return int(torch.argmax(q_values).item())

    def has_checkpoint(self):
        return self.model_manager is not None and self.model_manager.model_exists()

    def save_checkpoint(self):
        if self.model_manager is None:
            raise ValueError("❌ No model_dir configured for checkpoints.")
        with self._lock:
            path = self.model_manager.save_model(
                self.model,
                metadata={"model_version": self.version, "training_step": self.training_step},
            )
        self.logger.info(f"💾 Checkpoint saved to {path}")
        return path

    def load_checkpoint(self):
        if self.model_manager is None:
            raise ValueError("❌ No model_dir configured for checkpoints.")
        with self._lock:
            _, metadata = self.model_manager.load_model(self.model)
            self.target_model.load_state_dict(self.model.state_dict())
            self.training_step = int(metadata.get("training_step", 0))
        self.logger.info(f"📦 Checkpoint loaded at step {self.training_step}")
        return metadata
