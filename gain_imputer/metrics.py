from __future__ import annotations

import warnings

from dataclasses import dataclass
from typing import Dict, Optional, Union

import numpy as np
import pandas as pd
from scipy.stats import ConstantInputWarning, spearmanr
from sklearn.metrics import mean_absolute_error, mean_squared_error, r2_score

from .normalization import fit_normalization, normalize


Table = Union[np.ndarray, pd.DataFrame]


def _to_array(data: Table) -> np.ndarray:
    if isinstance(data, pd.DataFrame):
        return data.to_numpy(dtype=float)
    return np.asarray(data, dtype=float)


def rmse_loss(original: Table, imputed: Table, mask: Table) -> float:
    """RMSE on the missing cells of ``mask`` (1 observed, 0 or NaN missing).

    Both tables are normalized with parameters fit on ``original``, so the
    result is on the [0,1] scale of each column.

    Precondition: ``mask`` marks at least one cell as missing.
    """
    ori = _to_array(original)
    imp = _to_array(imputed)
    m = np.nan_to_num(_to_array(mask), nan=0.0)
    if not (ori.shape == imp.shape == m.shape):
        raise ValueError(f"shape mismatch: original {ori.shape}, imputed {imp.shape}, mask {m.shape}")

    n_missing = float(np.sum(1 - m))
    if n_missing == 0:
        raise ValueError("rmse_loss requires at least one missing cell in mask")

    params = fit_normalization(ori)
    ori_n = np.nan_to_num(normalize(ori, params), nan=0.0)
    imp_n = np.nan_to_num(normalize(imp, params), nan=0.0)

    nominator = np.sum(((1 - m) * ori_n - (1 - m) * imp_n) ** 2)
    return float(np.sqrt(nominator / n_missing))


def nrmse(true: np.ndarray, pred: np.ndarray, value_range: Optional[float] = None) -> float:
    """RMSE divided by the value range of the column (plain RMSE for a zero range)."""
    err = float(np.sqrt(mean_squared_error(true, pred)))
    if value_range is None:
        value_range = float(np.nanmax(true) - np.nanmin(true))
    if not value_range or value_range <= 0:
        return err
    return err / value_range


def spearman_rho(true: np.ndarray, pred: np.ndarray) -> float:
    """Spearman's rho on 1-D arrays; 0.0 where either side is (near) constant."""
    true = np.asarray(true, dtype=float)
    pred = np.asarray(pred, dtype=float)
    if true.size < 2:
        return float("nan")
    if not (np.nanstd(true) > 1e-12 and np.nanstd(pred) > 1e-12):
        return 0.0

    with warnings.catch_warnings():
        warnings.simplefilter("ignore", ConstantInputWarning)
        warnings.simplefilter("ignore", RuntimeWarning)
        rho = spearmanr(true, pred, nan_policy="omit")[0]
    return float(rho) if np.isfinite(rho) else 0.0


def compute_continuous_metrics(
    true_vals: np.ndarray,
    pred_vals: np.ndarray,
    full_true_col: Optional[pd.Series] = None,
) -> Dict[str, float]:
    """RMSE, NRMSE, MAE, mean bias, R2 and Spearman on the evaluated cells of one column.

    NRMSE uses the range of the whole ground-truth column when given.
    """
    y = np.asarray(true_vals, dtype=float)
    y_hat = np.asarray(pred_vals, dtype=float)
    source = y if full_true_col is None else full_true_col.to_numpy(dtype=float)
    value_range = float(np.nanmax(source) - np.nanmin(source))

    return {
        "RMSE": float(np.sqrt(mean_squared_error(y, y_hat))),
        "NRMSE": nrmse(y, y_hat, value_range),
        "MAE": float(mean_absolute_error(y, y_hat)),
        "MB": float(np.mean(y_hat - y)),
        "R2": float(r2_score(y, y_hat)) if y.size >= 2 else float("nan"),
        "Spearman": spearman_rho(y, y_hat),
    }


@dataclass
class EvaluationResult:
    per_feature: pd.DataFrame
    summary: Dict[str, float]


def evaluate_imputation(
    X_imputed: pd.DataFrame,
    X_complete: pd.DataFrame,
    X_missing: pd.DataFrame,
    mask_df: Optional[pd.DataFrame] = None,
) -> EvaluationResult:
    '''
    Per-feature metrics on positions that are missing in X_missing.
    If mask_df is provided, it must be boolean with True at evaluation positions.

    The summary also carries ``RMSE_norm``, the normalized RMSE of ``rmse_loss``.
    '''
    if mask_df is None:
        mask_df = X_missing.isna()

    rows = []
    for col in X_complete.columns:
        if col not in X_imputed.columns:
            continue
        miss_mask = mask_df[col]
        if int(miss_mask.sum()) == 0:
            continue

        true_s = pd.to_numeric(X_complete.loc[miss_mask, col], errors="coerce").dropna()
        pred_s = pd.to_numeric(X_imputed.loc[true_s.index, col], errors="coerce")
        if len(true_s) == 0:
            continue

        m = compute_continuous_metrics(true_s.values, pred_s.values, full_true_col=pd.to_numeric(X_complete[col], errors="coerce"))
        m.update({"feature": col, "n_eval": int(len(true_s))})
        rows.append(m)

    per_feature = pd.DataFrame(rows)

    summary: Dict[str, float] = {}
    if not per_feature.empty:
        for metric in ["NRMSE", "RMSE", "MAE", "MB", "R2", "Spearman"]:
            summary[f"cont_{metric}"] = float(np.nanmean(per_feature[metric].values))
        summary["n_features_eval"] = int(len(per_feature))
        summary["n_cells_eval"] = int(per_feature["n_eval"].sum())
        eval_mask = 1.0 - mask_df[X_complete.columns].to_numpy(dtype=float)
        summary["RMSE_norm"] = rmse_loss(X_complete, X_imputed[X_complete.columns], eval_mask)

    return EvaluationResult(per_feature=per_feature, summary=summary)
