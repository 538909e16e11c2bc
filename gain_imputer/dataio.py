"""Data I/O helpers.

GAIN works on purely numeric tables. ``load_table`` reads a CSV, cleans the
header and coerces every selected column to ``float64`` so that blank cells
and ``NA`` tokens become NaN (the missing marker used throughout the package).
Columns that cannot be parsed as numbers are rejected instead of silently
turned into NaN.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import numpy as np
import pandas as pd


def _strip_df_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Return a copy of ``df`` with whitespace-trimmed column names."""
    out = df.copy()
    out.columns = [str(c).strip() for c in out.columns]
    if len(set(out.columns)) != len(out.columns):
        raise ValueError(
            "Duplicate column names after stripping whitespace. "
            "Please sanitize the dataset headers."
        )
    return out


def load_table(path: Union[str, Path], columns: Optional[List[str]] = None, sep: str = ",") -> pd.DataFrame:
    """Load a numeric CSV table; missing cells become NaN."""
    df = _strip_df_columns(pd.read_csv(path, sep=sep))

    if columns:
        columns = [str(c).strip() for c in columns]
        absent = [c for c in columns if c not in df.columns]
        if absent:
            raise KeyError(
                f"Columns {absent} not found in {path}. Available columns: {list(df.columns)}"
            )
        df = df[columns]

    out = df.copy()
    bad: List[str] = []
    for col in out.columns:
        num = pd.to_numeric(out[col], errors="coerce")
        # values present in the file but not parseable as numbers
        if (num.isna() & out[col].notna()).any():
            bad.append(col)
        out[col] = num.astype("float64")
    if bad:
        raise ValueError(f"Non-numeric values in columns {bad} of {path}; GAIN needs numeric data.")
    return out


def save_mask(mask: np.ndarray, path: Union[str, Path], columns: Optional[List[str]] = None) -> None:
    """
    Save a 1/0 mask to .npy or .csv depending on suffix.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    suffix = path.suffix.lower()
    if suffix == ".npy":
        np.save(path, np.asarray(mask).astype(np.uint8))
    elif suffix == ".csv":
        pd.DataFrame(np.asarray(mask).astype(int), columns=columns).to_csv(path, index=False)
    else:
        raise ValueError(f"Unsupported mask format: {suffix}. Use .npy or .csv")


def save_json(obj: Dict[str, Any], path: Union[str, Path]) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(obj, indent=2, ensure_ascii=False, default=str) + "\n", encoding="utf-8")
