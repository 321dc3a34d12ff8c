import copy
import os

import torch


class ModelManager:
    def __init__(self, model_dir):
        self.model_dir = str(model_dir)
        os.makedirs(self.model_dir, exist_ok=True)

    def save_model(self, model, model_name="model.pt", metadata=None):
        path = os.path.join(self.model_dir, model_name)
        os.makedirs(self.model_dir, exist_ok=True)

        metadata = copy.deepcopy(metadata or {})
        payload = {
            "model_state_dict": model.state_dict(),
            "config": {
                **metadata,
                "input_dim": getattr(model, "input_dim", None),
                "model_version": metadata.get("model_version", "v1"),
            },
        }

        tmp_path = f"{path}.tmp"
        torch.save(payload, tmp_path)
        os.replace(tmp_path, path)
        return path

    def load_model(self, model, model_name="model.pt"):
        path = os.path.join(self.model_dir, model_name)
        if not os.path.exists(path):
            raise FileNotFoundError(f"❌ Model file not found: {path}")

        payload = torch.load(path, map_location=torch.device("cpu"))
        model.load_state_dict(payload["model_state_dict"])
        return model, payload.get("config", {})

    def model_exists(self, model_name="model.pt"):
        return os.path.exists(os.path.join(self.model_dir, model_name))
