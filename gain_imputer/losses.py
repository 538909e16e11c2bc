# losses.py - GAIN adversarial and reconstruction losses

from __future__ import annotations

from typing import Tuple

import torch


def discriminator_loss(m: torch.Tensor, d_prob: torch.Tensor, eps: float = 1e-8) -> torch.Tensor:
    """
    Binary cross-entropy between the mask and the discriminator output:

        L_D = -mean(M * log(D + eps) + (1 - M) * log(1 - D + eps))
    """
    return -torch.mean(m * torch.log(d_prob + eps) + (1 - m) * torch.log(1.0 - d_prob + eps))


def generator_loss(
    x_true: torch.Tensor,
    m: torch.Tensor,
    g_sample: torch.Tensor,
    d_prob: torch.Tensor,
    alpha: float,
    eps: float = 1e-8,
) -> Tuple[torch.Tensor, torch.Tensor, torch.Tensor]:
    """
    Generator loss, returned as ``(total, adversarial, mse)``:

        adversarial = -mean((1 - M) * log(D + eps))
        mse         = mean((M * X - M * G)^2) / mean(M)
        total       = adversarial + alpha * mse

    ``x_true`` holds the observed values (normalized); only its observed
    cells enter the loss.
    """
    adversarial = -torch.mean((1 - m) * torch.log(d_prob + eps))
    # clamp: a batch with no observed cell gives mse 0, not NaN
    mse = torch.mean((m * x_true - m * g_sample) ** 2) / torch.mean(m).clamp_min(eps)
    return adversarial + alpha * mse, adversarial, mse
