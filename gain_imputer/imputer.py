# imputer.py - GAIN Imputer
# Generative Adversarial Imputation Nets for numeric tables

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import List, Optional, Union

import numpy as np
import pandas as pd
import torch

from .config import GAINConfig
from .missingness import mask_from_data
from .networks import Discriminator, Generator
from .normalization import NormParameters, fit_normalization, normalize, renormalize
from .training import LossHistory, StoppingCriterion, sample_noise, train_gain
from .utils import DeviceConfig, make_rng, seed_torch_from


Table = Union[np.ndarray, pd.DataFrame]


@dataclass
class ImputationResult:
    imputed: Table
    mask: np.ndarray
    history: LossHistory
    norm_parameters: NormParameters
    rounded_columns: List[int] = field(default_factory=list)
    runtime_sec: float = 0.0


def discrete_columns(data_x: np.ndarray, threshold: int = 20) -> List[int]:
    """Columns whose observed values take fewer than ``threshold`` distinct values."""
    cols: List[int] = []
    for j in range(data_x.shape[1]):
        col = data_x[:, j]
        col = col[~np.isnan(col)]
        if len(col) > 0 and len(np.unique(col)) < threshold:
            cols.append(j)
    return cols


def rounding(imputed: np.ndarray, data_x: np.ndarray, threshold: int = 20) -> np.ndarray:
    """
    Round the missing cells of the discrete columns (see ``discrete_columns``)
    to the nearest integer; observed cells are left as they are.

    A heuristic for integer-coded columns; it does not check that rounded
    values are valid labels.
    """
    out = np.array(imputed, dtype=float, copy=True)
    for j in discrete_columns(data_x, threshold):
        miss = np.isnan(data_x[:, j])
        out[miss, j] = np.round(out[miss, j])
    return out


class GAINImputer:
    """
    GAIN imputer.

    Usage::

        imputer = GAINImputer(GAINConfig(iterations=5000))
        result = imputer.fit_transform(df_with_nans)
        result.imputed          # same type, shape, columns as the input
        result.history.to_frame()

    The input's NaN cells define the mask. Missingness injection is a separate
    step (``gain_imputer.missingness.inject_missingness``).
    """

    def __init__(self, config: Optional[GAINConfig] = None, stopping: Optional[StoppingCriterion] = None):
        self.cfg = (config or GAINConfig()).validate()
        self.stopping = stopping
        self.device = DeviceConfig(use_gpu=self.cfg.use_gpu).torch_device()

        self.rng_: Optional[np.random.Generator] = None
        self.generator: Optional[Generator] = None
        self.discriminator: Optional[Discriminator] = None
        self.norm_parameters_: Optional[NormParameters] = None
        self.history_: Optional[LossHistory] = None
        self.round_columns_: List[int] = []

    @staticmethod
    def _as_array(data: Table) -> np.ndarray:
        if isinstance(data, pd.DataFrame):
            non_numeric = [c for c in data.columns if not pd.api.types.is_numeric_dtype(data[c])]
            if non_numeric:
                raise ValueError(f"GAIN expects numeric columns; non-numeric: {non_numeric}")
            arr = data.to_numpy(dtype=float)
        else:
            arr = np.asarray(data, dtype=float)
        if arr.ndim != 2:
            raise ValueError(f"expected a 2-D table, got shape {arr.shape}")
        if arr.shape[0] == 0 or arr.shape[1] == 0:
            raise ValueError(f"cannot impute an empty table of shape {arr.shape}")
        if np.isinf(arr).any():
            raise ValueError("input contains infinite values")
        return arr

    @staticmethod
    def _wrap_like(template: Table, values: np.ndarray) -> Table:
        if isinstance(template, pd.DataFrame):
            return pd.DataFrame(values, columns=template.columns, index=template.index)
        return values

    def _banner(self, text: str) -> None:
        if self.cfg.verbose:
            print("=" * 70)
            print(text)
            print("=" * 70)

    def _log(self, text: str) -> None:
        if self.cfg.verbose:
            print(text)

    def fit_transform(self, data: Table) -> ImputationResult:
        """Train on ``data`` and return its imputed version."""
        t0 = time.time()
        data_x = self._as_array(data)
        mask = mask_from_data(data_x)
        n_samples, dim = data_x.shape

        self._banner("GAIN - imputation start")
        self._log(f"  samples: {n_samples}, features: {dim}")
        self._log(f"  observed rate: {mask.mean():.3f} (missing rate: {1 - mask.mean():.3f})")

        self.rng_ = make_rng(self.cfg.seed)

        self.norm_parameters_ = fit_normalization(data_x)
        norm_data = normalize(data_x, self.norm_parameters_)

        seed_torch_from(self.rng_)
        self.generator = Generator(dim, self.cfg.hidden_dim, self.cfg.init_method).to(self.device)
        self.discriminator = Discriminator(dim, self.cfg.hidden_dim, self.cfg.init_method).to(self.device)

        self._log(
            f"  alpha={self.cfg.alpha}, hint_rate={self.cfg.hint_rate}, batch_size={self.cfg.batch_size}, "
            f"iterations={self.cfg.iterations}, lr={self.cfg.learning_rate}, init={self.cfg.init_method}"
        )

        self.history_ = train_gain(
            self.generator,
            self.discriminator,
            norm_data,
            mask,
            self.cfg,
            self.rng_,
            self.device,
            stopping=self.stopping,
        )

        # Rounding decisions come from the training data, also for transform()
        self.round_columns_ = discrete_columns(data_x, self.cfg.round_threshold)

        imputed = self._impute_array(data_x, mask)
        runtime = float(time.time() - t0)

        self._log(f"  trained {len(self.history_)} iterations in {runtime:.1f}s")
        if self.round_columns_:
            self._log(f"  rounded columns: {self.round_columns_}")
        self._banner("GAIN - imputation done")

        return ImputationResult(
            imputed=self._wrap_like(data, imputed),
            mask=mask,
            history=self.history_,
            norm_parameters=self.norm_parameters_,
            rounded_columns=list(self.round_columns_),
            runtime_sec=runtime,
        )

    def transform(self, data: Table) -> Table:
        """Impute new data with the trained generator and fitted parameters."""
        if self.generator is None or self.norm_parameters_ is None:
            raise RuntimeError("GAINImputer is not fitted. Call fit_transform first.")
        data_x = self._as_array(data)
        mask = mask_from_data(data_x)
        return self._wrap_like(data, self._impute_array(data_x, mask))

    def _impute_array(self, data_x: np.ndarray, mask: np.ndarray) -> np.ndarray:
        n_samples, dim = data_x.shape
        norm_x = np.nan_to_num(normalize(data_x, self.norm_parameters_), nan=0.0)

        z = sample_noise(n_samples, dim, self.cfg.noise_scale, self.rng_)
        x_tilde = mask * norm_x + (1.0 - mask) * z

        self.generator.eval()
        with torch.no_grad():
            X = torch.tensor(x_tilde, dtype=torch.float32, device=self.device)
            M = torch.tensor(mask, dtype=torch.float32, device=self.device)
            g_final = self.generator(X, M).cpu().numpy().astype(float)

        imputed_norm = mask * norm_x + (1.0 - mask) * g_final
        imputed = renormalize(imputed_norm, self.norm_parameters_)

        # Observed cells are copied back so the normalization round-trip
        # cannot perturb them.
        imputed = np.where(mask == 1, data_x, imputed)

        for j in self.round_columns_:
            miss = mask[:, j] == 0
            imputed[miss, j] = np.round(imputed[miss, j])
        return imputed
