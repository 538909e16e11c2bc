"""Convergence plot for GAIN training."""

from __future__ import annotations

from pathlib import Path
from typing import Union

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from .training import LossHistory


def plot_loss_curves(history: LossHistory, out_png: Union[str, Path], dpi: int = 150) -> Path:
    """Generator and discriminator loss per iteration, MSE on a second panel."""
    out_png = Path(out_png)
    out_png.parent.mkdir(parents=True, exist_ok=True)

    df = history.to_frame()
    fig, (ax_adv, ax_mse) = plt.subplots(1, 2, figsize=(11, 4))

    ax_adv.plot(df["iteration"], df["G_loss"], label="Generator", linewidth=0.8)
    ax_adv.plot(df["iteration"], df["D_loss"], label="Discriminator", linewidth=0.8)
    ax_adv.set_xlabel("Iteration")
    ax_adv.set_ylabel("Loss")
    ax_adv.set_title("GAIN losses")
    ax_adv.legend()

    ax_mse.plot(df["iteration"], df["MSE_loss"], color="tab:green", linewidth=0.8)
    ax_mse.set_yscale("log")
    ax_mse.set_xlabel("Iteration")
    ax_mse.set_ylabel("Observed-cell MSE")
    ax_mse.set_title("Reconstruction")

    fig.tight_layout()
    fig.savefig(out_png, dpi=dpi, bbox_inches="tight")
    plt.close(fig)
    return out_png
