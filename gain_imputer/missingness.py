"""
missingness.py
========================================
Observed/missing masks and MCAR missingness injection.

Convention: mask value 1 = observed, 0 = missing; data marks missing cells
with NaN.

Injection is an explicit, optional stage. When it is applied to data that
already has NaNs, the synthetic mask is multiplied with the native one, so
the effective missing rate exceeds the nominal ``missing_rate``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Union

import numpy as np
import pandas as pd


Table = Union[np.ndarray, pd.DataFrame]


@dataclass
class MissingnessResult:
    """Return object for missingness injection."""
    data_missing: Table
    mask: np.ndarray  # float, 1 observed / 0 missing
    actual_rate: float


def _as_2d_float(data: Table) -> np.ndarray:
    arr = data.to_numpy(dtype=float) if isinstance(data, pd.DataFrame) else np.asarray(data, dtype=float)
    if arr.ndim != 2:
        raise ValueError(f"expected a 2-D table, got shape {arr.shape}")
    return arr


def binary_sampler(p: float, rows: int, cols: int, rng: np.random.Generator) -> np.ndarray:
    """
    I.i.d. Bernoulli matrix: each entry is 1 with probability ``p``.
    """
    if p < 0 or p > 1:
        raise ValueError(f"p must be in [0,1], got {p}")
    return (rng.uniform(0.0, 1.0, size=(rows, cols)) < p).astype(float)


def mask_from_data(data: Table) -> np.ndarray:
    """1 where a value is present, 0 where it is NaN."""
    arr = _as_2d_float(data)
    return (~np.isnan(arr)).astype(float)


def apply_mask(data: Table, mask: np.ndarray) -> Table:
    """Return a copy of ``data`` with mask==0 positions set to NaN."""
    mask = np.asarray(mask)
    if mask.shape != data.shape:
        raise ValueError(f"mask shape {mask.shape} != data shape {data.shape}")
    missing = mask == 0
    if isinstance(data, pd.DataFrame):
        return data.astype(float).mask(missing)
    out = np.array(data, dtype=float, copy=True)
    out[missing] = np.nan
    return out


def inject_missingness(data: Table, missing_rate: float, rng: np.random.Generator) -> MissingnessResult:
    """
    Erase each cell independently with probability ``missing_rate``.

    Native NaNs stay missing (multiplicative composition with the synthetic
    mask). ``actual_rate`` is the effective missing fraction over all cells.
    """
    if missing_rate < 0 or missing_rate > 1:
        raise ValueError(f"missing_rate must be in [0,1], got {missing_rate}")

    native = mask_from_data(data)
    n_rows, n_cols = native.shape
    synthetic = binary_sampler(1.0 - missing_rate, n_rows, n_cols, rng)
    mask = native * synthetic

    data_missing = apply_mask(data, mask)
    return MissingnessResult(
        data_missing=data_missing,
        mask=mask,
        actual_rate=float(1.0 - mask.mean()) if mask.size else 0.0,
    )


def missing_rate(data: Table) -> float:
    """Overall missing rate (fraction of NaN cells)."""
    arr = _as_2d_float(data)
    return float(np.isnan(arr).mean()) if arr.size else 0.0


def per_column_missing_rates(df: pd.DataFrame) -> Dict[str, float]:
    """Per-column missing rate."""
    return {str(c): float(df[c].isna().mean()) for c in df.columns}
