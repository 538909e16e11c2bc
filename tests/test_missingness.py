import numpy as np
import pandas as pd
import pytest

from gain_imputer.missingness import (
    apply_mask,
    binary_sampler,
    inject_missingness,
    mask_from_data,
    missing_rate,
    per_column_missing_rates,
)


def test_binary_sampler_rate_converges():
    rng = np.random.default_rng(0)
    mask = binary_sampler(0.8, 400, 500, rng)

    assert mask.shape == (400, 500)
    assert set(np.unique(mask)) <= {0.0, 1.0}
    assert abs(mask.mean() - 0.8) < 0.01


def test_binary_sampler_rejects_bad_probability():
    with pytest.raises(ValueError):
        binary_sampler(1.2, 2, 2, np.random.default_rng(0))


def test_mask_from_data_marks_nan_as_missing():
    data = np.array([[1.0, np.nan], [np.nan, 4.0]])
    assert np.array_equal(mask_from_data(data), np.array([[1.0, 0.0], [0.0, 1.0]]))


def test_inject_missingness_composes_with_native_missing():
    data = np.ones((200, 3))
    data[:10, 0] = np.nan
    result = inject_missingness(data, 0.3, np.random.default_rng(1))

    assert np.all(result.mask[:10, 0] == 0)
    assert np.array_equal(np.isnan(result.data_missing), result.mask == 0)
    assert result.actual_rate == pytest.approx(1 - result.mask.mean())
    assert result.actual_rate > 10 / 600


def test_inject_missingness_zero_rate_keeps_native_mask():
    df = pd.DataFrame({"x": [1.0, np.nan, 3.0], "y": [4.0, 5.0, 6.0]})
    result = inject_missingness(df, 0.0, np.random.default_rng(0))

    assert np.array_equal(result.mask, mask_from_data(df))
    assert isinstance(result.data_missing, pd.DataFrame)
    assert list(result.data_missing.columns) == ["x", "y"]


def test_inject_missingness_rejects_bad_rate():
    with pytest.raises(ValueError):
        inject_missingness(np.ones((3, 3)), -0.1, np.random.default_rng(0))


def test_apply_mask_keeps_frame_layout():
    df = pd.DataFrame({"x": [1, 2], "y": [3, 4]}, index=[10, 20])
    out = apply_mask(df, np.array([[1, 0], [0, 1]]))

    assert list(out.index) == [10, 20]
    assert np.isnan(out.loc[10, "y"]) and np.isnan(out.loc[20, "x"])
    assert out.loc[10, "x"] == 1.0
    assert df.notna().all().all()


def test_apply_mask_shape_mismatch():
    with pytest.raises(ValueError):
        apply_mask(np.ones((2, 2)), np.ones((2, 3)))


def test_missing_rate_helpers():
    df = pd.DataFrame({"x": [1.0, np.nan, 3.0, np.nan], "y": [1.0, 2.0, 3.0, 4.0]})
    assert missing_rate(df) == pytest.approx(0.25)
    assert per_column_missing_rates(df) == {"x": 0.5, "y": 0.0}
