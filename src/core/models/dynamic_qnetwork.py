import torch.nn as nn

from core.shared.actions import Action

ACTIVATIONS = {
    "relu": nn.ReLU,
    "sigmoid": nn.Sigmoid,
    "softmax": lambda: nn.Softmax(dim=-1),
    "tanh": nn.Tanh,
    "linear": nn.Identity,
}


class DynamicQNetwork(nn.Module):
    """
    MLP backbone with named output heads, built from a model_config mapping:

        input_dim: 8
        architecture:
          profiles:
            balanced: {hidden_layers: [64, 32], activation: relu, dropout: 0.0}
        output_heads:
          q_values: {shape_from: actions, activation: linear}

    `input_dim` passed to the constructor wins over the mapping, so one
    model_config can serve feature vectors of different widths.
    """

    def __init__(self, config, profile="balanced", input_dim=None):
        super().__init__()

        self.config = config
        self.profile = profile
        self.input_dim = int(input_dim or config.get("input_dim") or 0)
        if self.input_dim <= 0:
            raise ValueError("❌ 'input_dim' must be a positive integer in model_config.yaml")

        profiles = config["architecture"]["profiles"]
        if profile not in profiles:
            raise ValueError(f"❌ Invalid profile '{profile}'. Available profiles: {list(profiles.keys())}")

        self.backbone, backbone_dim = self._build_backbone(profiles[profile])
        self.heads = nn.ModuleDict({
            name: nn.Sequential(nn.Linear(backbone_dim, self._head_dim(name, head_cfg)), ACTIVATIONS[head_cfg["activation"]]())
            for name, head_cfg in config["output_heads"].items()
        })

    def _build_backbone(self, profile_cfg):
        activation_fn = ACTIVATIONS[profile_cfg["activation"]]
        dropout = profile_cfg.get("dropout", 0.0)

        layers = []
        prev_dim = self.input_dim
        for width in profile_cfg["hidden_layers"]:
            layers.append(nn.Linear(prev_dim, width))
            layers.append(activation_fn())
            if dropout > 0:
                layers.append(nn.Dropout(dropout))
            prev_dim = width
        return nn.Sequential(*layers), prev_dim

    def _head_dim(self, name, head_cfg):
        if "shape" in head_cfg:
            return head_cfg["shape"][0]
        source = head_cfg.get("shape_from")
        if source is None:
            raise KeyError(f"❌ Output head '{name}' must define either 'shape' or 'shape_from'")
        if source == "actions":
            return len(Action)
        if source == "input_dim":
            return self.input_dim
        raise ValueError(f"Unsupported shape_from: {source} in head '{name}'")

    def forward(self, x):
        features = self.backbone(x)
        return {name: head(features) for name, head in self.heads.items()}
