"""Comparison baselines.

Off-the-shelf imputers run next to GAIN on the same missing table:

- MeanMode: column mean of the observed values
- MICE: scikit-learn ``IterativeImputer`` with posterior sampling

Each baseline exposes the same call::

    imputer = build_baseline_imputer("MICE", seed=42)
    X_imputed = imputer.impute(X_missing)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

import numpy as np
import pandas as pd
from sklearn.experimental import enable_iterative_imputer  # noqa: F401
from sklearn.impute import IterativeImputer, SimpleImputer


def _filter_kwargs(kwargs: Dict[str, Any], allowed: List[str]) -> Dict[str, Any]:
    """Return a new kwargs dict containing only the allowed keys with non-None values."""
    return {k: kwargs[k] for k in allowed if k in kwargs and kwargs[k] is not None}


def _fit_transform_frame(imputer, X_missing: pd.DataFrame) -> pd.DataFrame:
    X = X_missing.astype(float)
    # sklearn imputers silently drop all-NaN columns, which would break alignment.
    all_missing = X.columns[X.isna().all()].tolist()
    if all_missing:
        raise ValueError(f"Columns with no observed values cannot be imputed: {all_missing}")
    values = np.asarray(imputer.fit_transform(X.to_numpy()), dtype=float)
    return pd.DataFrame(values, columns=X.columns, index=X.index)


class BaseBaseline:
    method: str

    def impute(self, X_missing: pd.DataFrame) -> pd.DataFrame:
        raise NotImplementedError


@dataclass
class MeanModeBaseline(BaseBaseline):
    def __post_init__(self):
        self.method = "MeanMode"

    def impute(self, X_missing: pd.DataFrame) -> pd.DataFrame:
        return _fit_transform_frame(SimpleImputer(strategy="mean"), X_missing)


@dataclass
class MICEBaseline(BaseBaseline):
    """
    Chained-equation imputation via ``IterativeImputer``.

    ``sample_posterior=True`` draws one imputation from the predictive
    distribution, the single-draw analogue of mice.
    """
    max_iter: int = 10
    seed: int = 42
    sample_posterior: bool = True

    def __post_init__(self):
        self.method = "MICE"

    def impute(self, X_missing: pd.DataFrame) -> pd.DataFrame:
        imp = IterativeImputer(
            max_iter=int(self.max_iter),
            sample_posterior=bool(self.sample_posterior),
            random_state=int(self.seed),
        )
        return _fit_transform_frame(imp, X_missing)


_REGISTRY = {
    "MeanMode": MeanModeBaseline,
    "MICE": MICEBaseline,
}


def list_baselines() -> List[str]:
    return sorted(_REGISTRY.keys())


def build_baseline_imputer(method: str, *, seed: int = 42, **kwargs: Any) -> BaseBaseline:
    """Build a baseline imputer by name."""
    m = str(method).strip()
    if m not in _REGISTRY:
        raise KeyError(f"Unknown baseline method '{method}'. Available: {list_baselines()}")

    if m == "MICE":
        filtered = _filter_kwargs(kwargs, ["max_iter", "sample_posterior"])
        filtered["seed"] = int(seed)
        return MICEBaseline(**filtered)
    return _REGISTRY[m]()
