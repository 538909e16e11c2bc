# normalization.py - Min-max normalization on observed entries

from __future__ import annotations

import warnings
from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class NormParameters:
    """Per-column min/max fitted on observed entries.

    ``scale`` is ``max - min`` except for degenerate columns, where it is 1.0:
      - constant columns are only shifted by their minimum;
      - fully missing columns get ``min = 0`` and are left unscaled.
    """
    min_val: np.ndarray
    max_val: np.ndarray
    scale: np.ndarray

    @property
    def n_features(self) -> int:
        return int(self.min_val.shape[0])


def _check_width(data: np.ndarray, params: NormParameters) -> np.ndarray:
    arr = np.asarray(data, dtype=float)
    if arr.ndim != 2 or arr.shape[1] != params.n_features:
        raise ValueError(
            f"data shape {arr.shape} does not match normalization parameters "
            f"with {params.n_features} features"
        )
    return arr


def fit_normalization(data: np.ndarray) -> NormParameters:
    arr = np.asarray(data, dtype=float)
    if arr.ndim != 2:
        raise ValueError(f"expected a 2-D table, got shape {arr.shape}")

    observed = ~np.isnan(arr)
    empty = ~observed.any(axis=0)

    with warnings.catch_warnings():
        # nanmin/nanmax warn on all-NaN columns; handled below
        warnings.simplefilter("ignore", category=RuntimeWarning)
        min_val = np.nanmin(arr, axis=0) if arr.shape[0] else np.full(arr.shape[1], np.nan)
        max_val = np.nanmax(arr, axis=0) if arr.shape[0] else np.full(arr.shape[1], np.nan)

    min_val = np.where(empty, 0.0, min_val)
    max_val = np.where(empty, 0.0, max_val)

    scale = max_val - min_val
    constant = (scale == 0) & ~empty
    scale = np.where(scale == 0, 1.0, scale)

    if empty.any():
        warnings.warn(
            f"Columns {np.flatnonzero(empty).tolist()} have no observed values; left unscaled.",
            UserWarning,
            stacklevel=2,
        )
    if constant.any():
        warnings.warn(
            f"Columns {np.flatnonzero(constant).tolist()} are constant; scaled by 1.0.",
            UserWarning,
            stacklevel=2,
        )

    return NormParameters(min_val=min_val, max_val=max_val, scale=scale)


def normalize(data: np.ndarray, params: NormParameters) -> np.ndarray:
    """Map each column to [0,1] using ``params``. NaN stays NaN."""
    arr = _check_width(data, params)
    return (arr - params.min_val) / params.scale


def renormalize(data: np.ndarray, params: NormParameters) -> np.ndarray:
    """Exact inverse of :func:`normalize`."""
    arr = _check_width(data, params)
    return arr * params.scale + params.min_val
