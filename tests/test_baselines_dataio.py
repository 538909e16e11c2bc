import numpy as np
import pandas as pd
import pytest

from gain_imputer.baselines import build_baseline_imputer, list_baselines
from gain_imputer.dataio import load_table, save_json, save_mask


def test_list_and_unknown_baseline():
    assert list_baselines() == ["MICE", "MeanMode"]
    with pytest.raises(KeyError, match="Available"):
        build_baseline_imputer("KNN")


def test_mean_mode_fills_column_means():
    df = pd.DataFrame({"x": [1.0, np.nan, 3.0], "y": [np.nan, 4.0, 8.0]}, index=[5, 6, 7])
    out = build_baseline_imputer("MeanMode").impute(df)

    assert out.loc[6, "x"] == 2.0
    assert out.loc[5, "y"] == 6.0
    assert list(out.index) == [5, 6, 7]


def test_mice_baseline_imputes_everything(small_frame):
    out = build_baseline_imputer("MICE", seed=1, max_iter=3).impute(small_frame)

    assert out.shape == small_frame.shape
    assert not out.isna().any().any()
    observed = small_frame.notna().to_numpy()
    assert np.allclose(out.to_numpy()[observed], small_frame.to_numpy()[observed])


def test_baseline_rejects_all_missing_column():
    df = pd.DataFrame({"x": [1.0, 2.0], "y": [np.nan, np.nan]})
    with pytest.raises(ValueError, match="no observed values"):
        build_baseline_imputer("MeanMode").impute(df)


def test_load_table_cleans_header_and_missing_cells(tmp_path):
    path = tmp_path / "data.csv"
    path.write_text(" a ,b,c\n1,2,x\n,4,y\n5,NA,z\n", encoding="utf-8")

    df = load_table(path, columns=["a", "b"])

    assert list(df.columns) == ["a", "b"]
    assert df.dtypes.tolist() == [np.dtype("float64")] * 2
    assert np.isnan(df.loc[1, "a"]) and np.isnan(df.loc[2, "b"])


def test_load_table_rejects_non_numeric(tmp_path):
    path = tmp_path / "data.csv"
    path.write_text("a,b\n1,2\n3,oops\n", encoding="utf-8")
    with pytest.raises(ValueError, match=r"\['b'\]"):
        load_table(path)


def test_load_table_unknown_column(tmp_path):
    path = tmp_path / "data.csv"
    path.write_text("a,b\n1,2\n", encoding="utf-8")
    with pytest.raises(KeyError):
        load_table(path, columns=["z"])


def test_save_mask_formats(tmp_path):
    mask = np.array([[1.0, 0.0], [1.0, 1.0]])

    save_mask(mask, tmp_path / "m.npy")
    assert np.array_equal(np.load(tmp_path / "m.npy"), mask.astype(np.uint8))

    save_mask(mask, tmp_path / "m.csv", columns=["p", "q"])
    assert pd.read_csv(tmp_path / "m.csv").to_numpy().tolist() == [[1, 0], [1, 1]]

    with pytest.raises(ValueError):
        save_mask(mask, tmp_path / "m.txt")


def test_save_json(tmp_path):
    save_json({"rmse": 0.1}, tmp_path / "out" / "s.json")
    assert (tmp_path / "out" / "s.json").read_text(encoding="utf-8").strip().startswith("{")
