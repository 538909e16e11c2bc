# training.py - GAIN training loop
#
# One iteration = one discriminator step followed by one generator step on
# the same mini-batch and hint; the generator sees the just-updated
# discriminator.

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional

import numpy as np
import pandas as pd
import torch
import torch.nn as nn
import torch.optim as optim
from tqdm.auto import tqdm

from .config import GAINConfig
from .losses import discriminator_loss, generator_loss


@dataclass
class LossHistory:
    """Per-iteration losses, append-only."""
    g_loss: List[float] = field(default_factory=list)
    d_loss: List[float] = field(default_factory=list)
    mse_loss: List[float] = field(default_factory=list)

    def append(self, g_loss: float, d_loss: float, mse_loss: float) -> None:
        self.g_loss.append(float(g_loss))
        self.d_loss.append(float(d_loss))
        self.mse_loss.append(float(mse_loss))

    def __len__(self) -> int:
        return len(self.g_loss)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "iteration": np.arange(1, len(self) + 1),
                "G_loss": self.g_loss,
                "D_loss": self.d_loss,
                "MSE_loss": self.mse_loss,
            }
        )

    def save(self, path) -> None:
        self.to_frame().to_csv(path, index=False)


# Called after every iteration; returning True ends training early.
StoppingCriterion = Callable[[LossHistory], bool]


class LossPlateau:
    """
    Stop when the mean generator MSE over the last ``window`` iterations has
    not improved by more than ``tol`` (relative) on the previous window.

    Never fires before ``min_iterations``.
    """

    def __init__(self, window: int = 500, tol: float = 1e-3, min_iterations: int = 1000):
        if window <= 0:
            raise ValueError(f"window must be positive, got {window}")
        self.window = int(window)
        self.tol = float(tol)
        self.min_iterations = int(min_iterations)

    def __call__(self, history: LossHistory) -> bool:
        n = len(history)
        if n < max(self.min_iterations, 2 * self.window):
            return False
        recent = float(np.mean(history.mse_loss[-self.window:]))
        previous = float(np.mean(history.mse_loss[-2 * self.window:-self.window]))
        if previous <= 0:
            return True
        return (previous - recent) / previous < self.tol


def sample_batch_index(n_samples: int, batch_size: int, rng: np.random.Generator) -> np.ndarray:
    """
    Fresh random batch each call; no duplicate rows inside one batch.
    """
    if n_samples <= batch_size:
        return rng.permutation(n_samples)
    return rng.permutation(n_samples)[:batch_size]


def sample_noise(rows: int, cols: int, scale: float, rng: np.random.Generator) -> np.ndarray:
    """U(0, scale) fill for missing cells."""
    return rng.uniform(0.0, scale, size=(rows, cols))


def sample_hint(mask: np.ndarray, hint_rate: float, rng: np.random.Generator) -> np.ndarray:
    """
    H = M * B + 0.5 * (1 - B), with B ~ Bernoulli(hint_rate).

    Revealed cells carry the true mask value, the rest the neutral 0.5.
    """
    b = (rng.uniform(0.0, 1.0, size=mask.shape) < hint_rate).astype(float)
    return mask * b + 0.5 * (1.0 - b)


def _to_tensor(arr: np.ndarray, device: torch.device) -> torch.Tensor:
    return torch.tensor(arr, dtype=torch.float32, device=device)


def train_gain(
    generator: nn.Module,
    discriminator: nn.Module,
    data_norm: np.ndarray,
    mask: np.ndarray,
    config: GAINConfig,
    rng: np.random.Generator,
    device: torch.device,
    stopping: Optional[StoppingCriterion] = None,
) -> LossHistory:
    """
    Run ``config.iterations`` alternating D/G updates.

    ``data_norm`` is the normalized table (NaN in missing cells is allowed;
    those cells never reach the networks). ``mask`` is 1 observed / 0 missing.
    """
    data_norm = np.asarray(data_norm, dtype=float)
    mask = np.asarray(mask, dtype=float)
    if data_norm.shape != mask.shape:
        raise ValueError(f"mask shape {mask.shape} != data shape {data_norm.shape}")

    n_samples, dim = data_norm.shape
    data_x = np.nan_to_num(data_norm, nan=0.0)

    betas = (config.beta1, config.beta2)
    d_optimizer = optim.Adam(discriminator.parameters(), lr=config.learning_rate, betas=betas)
    g_optimizer = optim.Adam(generator.parameters(), lr=config.learning_rate, betas=betas)

    generator.train()
    discriminator.train()

    history = LossHistory()
    eps = config.epsilon

    iterator = range(config.iterations)
    if config.verbose:
        iterator = tqdm(iterator, desc="GAIN", total=config.iterations)

    for iteration in iterator:
        idx = sample_batch_index(n_samples, config.batch_size, rng)
        x_mb = data_x[idx]
        m_mb = mask[idx]
        z_mb = sample_noise(len(idx), dim, config.noise_scale, rng)
        h_mb = sample_hint(m_mb, config.hint_rate, rng)
        x_mb = m_mb * x_mb + (1.0 - m_mb) * z_mb

        X = _to_tensor(x_mb, device)
        M = _to_tensor(m_mb, device)
        H = _to_tensor(h_mb, device)

        # ---- Discriminator ----
        d_optimizer.zero_grad()
        with torch.no_grad():
            G_sample = generator(X, M)
        X_hat = M * X + (1 - M) * G_sample
        D_prob = discriminator(X_hat, H)
        D_loss = discriminator_loss(M, D_prob, eps)
        D_loss.backward()
        d_optimizer.step()

        # ---- Generator ----
        g_optimizer.zero_grad()
        G_sample = generator(X, M)
        X_hat = M * X + (1 - M) * G_sample
        D_prob = discriminator(X_hat, H)
        G_loss, adv_loss, mse_loss = generator_loss(X, M, G_sample, D_prob, config.alpha, eps)
        G_loss.backward()
        g_optimizer.step()

        d_val, g_val, mse_val = D_loss.item(), G_loss.item(), mse_loss.item()
        if not (np.isfinite(d_val) and np.isfinite(g_val)):
            raise FloatingPointError(
                f"Non-finite loss at iteration {iteration + 1}: D={d_val}, G={g_val}"
            )
        history.append(g_val, d_val, mse_val)

        if config.verbose and (iteration + 1) % config.print_loss_every == 0:
            tqdm.write(
                f"  Iter {iteration + 1:5d}/{config.iterations}: "
                f"D={d_val:.4f}, G={g_val:.4f} (adv={adv_loss.item():.4f}, mse={mse_val:.6f})"
            )

        if stopping is not None and stopping(history):
            if config.verbose:
                tqdm.write(f"  Stopping criterion met at iteration {iteration + 1}")
            break

    return history
