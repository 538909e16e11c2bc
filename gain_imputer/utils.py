# utils.py - Seeding and device helpers for GAIN

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np
import torch


def make_rng(seed: Optional[int]) -> np.random.Generator:
    """
    Single random source for one imputation run.

    Masks, noise, hints and mini-batches are all drawn from the returned
    generator; torch weight init is seeded from it via ``seed_torch_from``.
    """
    return np.random.default_rng(seed)


def seed_torch_from(rng: np.random.Generator) -> int:
    """
    Draw a torch seed from ``rng`` and apply it. Returns the seed used.
    """
    seed = int(rng.integers(0, 2**31 - 1))
    torch.manual_seed(seed)
    if torch.cuda.is_available():
        torch.cuda.manual_seed_all(seed)
    return seed


@dataclass
class DeviceConfig:
    use_gpu: bool = False

    def torch_device(self) -> torch.device:
        if self.use_gpu and torch.cuda.is_available():
            return torch.device("cuda")
        return torch.device("cpu")
