"""
GAIN generator and discriminator networks.

Both take the concatenation of a data vector and a mask-like vector
(mask for the generator, hint for the discriminator) and emit one value
per feature through a final Sigmoid:

    Generator:      [x_tilde, m] -> reconstruction in [0, 1]
    Discriminator:  [x_hat,  h]  -> P(cell observed) in (0, 1)

Reference:
    Yoon, J., Jordon, J., & Schaar, M. (2018).
    GAIN: Missing Data Imputation using Generative Adversarial Nets. ICML 2018.
"""

from __future__ import annotations

from typing import Optional

import torch
import torch.nn as nn

from .config import INIT_METHODS


def init_weights(module: nn.Module, method: str) -> None:
    """Initialize every Linear layer of ``module``; biases are zeroed."""
    if method not in INIT_METHODS:
        raise ValueError(f"Unsupported init_method '{method}'. Available: {list(INIT_METHODS)}")

    for m in module.modules():
        if not isinstance(m, nn.Linear):
            continue
        if method == "xavier_normal":
            nn.init.xavier_normal_(m.weight)
        elif method == "xavier_uniform":
            nn.init.xavier_uniform_(m.weight)
        elif method == "kaiming_normal":
            nn.init.kaiming_normal_(m.weight, mode="fan_in", nonlinearity="relu")
        else:
            nn.init.normal_(m.weight, mean=0.0, std=0.01)
        if m.bias is not None:
            nn.init.zeros_(m.bias)


def _mlp(input_dim: int, hidden_dim: int) -> nn.Sequential:
    return nn.Sequential(
        nn.Linear(input_dim * 2, hidden_dim),
        nn.ReLU(),
        nn.Linear(hidden_dim, hidden_dim),
        nn.ReLU(),
        nn.Linear(hidden_dim, input_dim),
        nn.Sigmoid(),
    )


class Generator(nn.Module):
    """
    Maps (corrupted data, mask) to a full reconstruction.

    Missing cells of ``x`` carry small uniform noise supplied by the caller;
    the network itself is deterministic.
    """
    def __init__(self, input_dim: int, hidden_dim: Optional[int] = None, init_method: str = "xavier_normal"):
        super().__init__()
        self.input_dim = int(input_dim)
        self.hidden_dim = int(hidden_dim or input_dim)
        self.net = _mlp(self.input_dim, self.hidden_dim)
        init_weights(self, init_method)

    def forward(self, x: torch.Tensor, m: torch.Tensor) -> torch.Tensor:
        inputs = torch.cat([x, m], dim=1)
        return self.net(inputs)


class Discriminator(nn.Module):
    """
    Maps (reconstruction, hint) to per-feature probabilities of being observed.
    """
    def __init__(self, input_dim: int, hidden_dim: Optional[int] = None, init_method: str = "xavier_normal"):
        super().__init__()
        self.input_dim = int(input_dim)
        self.hidden_dim = int(hidden_dim or input_dim)
        self.net = _mlp(self.input_dim, self.hidden_dim)
        init_weights(self, init_method)

    def forward(self, x: torch.Tensor, h: torch.Tensor) -> torch.Tensor:
        inputs = torch.cat([x, h], dim=1)
        return self.net(inputs)
