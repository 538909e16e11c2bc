import numpy as np
import pandas as pd
import pytest

from gain_imputer.metrics import compute_continuous_metrics, evaluate_imputation, rmse_loss, spearman_rho


@pytest.fixture
def triple():
    rng = np.random.default_rng(0)
    original = rng.normal(size=(60, 3))
    imputed = original + rng.normal(scale=0.3, size=original.shape)
    mask = (rng.uniform(size=original.shape) < 0.7).astype(float)
    return original, imputed, mask


def test_rmse_zero_when_missing_cells_match(triple):
    original, imputed, mask = triple
    fixed = np.where(mask == 0, original, imputed)
    assert rmse_loss(original, fixed, mask) == 0.0


def test_rmse_known_value():
    original = np.array([[0.0, 0.0], [1.0, 1.0]])
    imputed = np.array([[0.5, 0.0], [1.0, 1.0]])
    mask = np.array([[0.0, 1.0], [1.0, 1.0]])
    assert rmse_loss(original, imputed, mask) == pytest.approx(0.5)


def test_rmse_invariant_to_consistent_rescaling(triple):
    original, imputed, mask = triple
    a = np.array([2.0, 10.0, 0.5])
    b = np.array([1.0, -5.0, 3.0])

    assert rmse_loss(original * a + b, imputed * a + b, mask) == pytest.approx(
        rmse_loss(original, imputed, mask)
    )


def test_nan_mask_entries_count_as_missing(triple):
    original, imputed, mask = triple
    nan_mask = np.where(mask == 0, np.nan, 1.0)
    assert rmse_loss(original, imputed, nan_mask) == pytest.approx(rmse_loss(original, imputed, mask))


def test_rmse_requires_a_missing_cell(triple):
    original, imputed, _ = triple
    with pytest.raises(ValueError, match="at least one missing cell"):
        rmse_loss(original, imputed, np.ones_like(original))


def test_rmse_shape_mismatch(triple):
    original, imputed, mask = triple
    with pytest.raises(ValueError):
        rmse_loss(original, imputed[:, :2], mask)


def test_evaluate_imputation_per_feature(triple):
    original, imputed, mask = triple
    cols = ["a", "b", "c"]
    X_complete = pd.DataFrame(original, columns=cols)
    X_imputed = pd.DataFrame(imputed, columns=cols)
    X_missing = X_complete.mask(mask == 0)

    res = evaluate_imputation(X_imputed, X_complete, X_missing)

    assert res.per_feature["feature"].tolist() == cols
    assert res.per_feature["n_eval"].sum() == int((mask == 0).sum())
    assert res.summary["n_features_eval"] == 3
    assert res.summary["RMSE_norm"] == pytest.approx(rmse_loss(original, imputed, mask))
    assert 0 < res.summary["cont_RMSE"] < 1


def test_evaluate_imputation_skips_complete_columns():
    X_complete = pd.DataFrame({"a": [1.0, 2.0, 3.0], "b": [1.0, 2.0, 4.0]})
    X_missing = X_complete.copy()
    X_missing.loc[1, "a"] = np.nan
    X_imputed = X_complete.copy()

    res = evaluate_imputation(X_imputed, X_complete, X_missing)
    assert res.per_feature["feature"].tolist() == ["a"]
    assert res.summary["RMSE_norm"] == 0.0


def test_spearman_constant_input_is_zero():
    assert spearman_rho(np.ones(5), np.arange(5)) == 0.0
    assert spearman_rho(np.arange(5), np.arange(5)) == pytest.approx(1.0)


def test_continuous_metrics_use_full_column_range():
    true = np.array([1.0, 2.0, 3.0])
    pred = np.array([2.0, 2.0, 4.0])
    full = pd.Series([0.0, 1.0, 2.0, 3.0, 10.0])

    m = compute_continuous_metrics(true, pred, full_true_col=full)

    assert m["MAE"] == pytest.approx(2.0 / 3.0)
    assert m["MB"] == pytest.approx(2.0 / 3.0)
    assert m["NRMSE"] == pytest.approx(m["RMSE"] / 10.0)
