import numpy as np
import pytest
import torch

from gain_imputer import GAINConfig
from gain_imputer.networks import Discriminator, Generator
from gain_imputer.training import (
    LossHistory,
    LossPlateau,
    sample_batch_index,
    sample_hint,
    sample_noise,
    train_gain,
)


def _history(mse_values):
    h = LossHistory()
    for v in mse_values:
        h.append(1.0, 1.0, v)
    return h


def test_hint_reveals_mask_or_neutral_value():
    rng = np.random.default_rng(0)
    mask = (rng.uniform(size=(50, 6)) < 0.7).astype(float)
    hint = sample_hint(mask, 0.9, rng)

    assert set(np.unique(hint)) <= {0.0, 0.5, 1.0}
    revealed = hint != 0.5
    assert np.array_equal(hint[revealed], mask[revealed])
    assert 0.8 < revealed.mean() < 0.97


def test_hint_extremes():
    rng = np.random.default_rng(0)
    mask = np.array([[1.0, 0.0], [0.0, 1.0]])

    assert np.array_equal(sample_hint(mask, 1.0, rng), mask)
    assert np.all(sample_hint(mask, 0.0, rng) == 0.5)


def test_batch_index_unique_and_bounded():
    rng = np.random.default_rng(0)
    idx = sample_batch_index(100, 32, rng)

    assert len(idx) == 32
    assert len(np.unique(idx)) == 32
    assert idx.min() >= 0 and idx.max() < 100
    assert sorted(sample_batch_index(10, 32, rng).tolist()) == list(range(10))


def test_noise_range():
    z = sample_noise(100, 4, 0.01, np.random.default_rng(0))
    assert z.shape == (100, 4)
    assert z.min() >= 0.0 and z.max() <= 0.01


def _setup(dim=3, n=64, seed=0):
    rng = np.random.default_rng(seed)
    data = rng.uniform(size=(n, dim))
    mask = (rng.uniform(size=(n, dim)) < 0.8).astype(float)
    data[mask == 0] = np.nan
    torch.manual_seed(seed)
    return rng, data, mask, Generator(dim), Discriminator(dim)


def test_train_gain_runs_fixed_iterations_and_updates_both_networks():
    rng, data, mask, gen, disc = _setup()
    g_before = [p.detach().clone() for p in gen.parameters()]
    d_before = [p.detach().clone() for p in disc.parameters()]

    cfg = GAINConfig(iterations=25, batch_size=16)
    history = train_gain(gen, disc, data, mask, cfg, rng, torch.device("cpu"))

    assert len(history) == 25
    assert np.all(np.isfinite(history.g_loss)) and np.all(np.isfinite(history.d_loss))
    assert any(not torch.equal(a, b) for a, b in zip(g_before, gen.parameters()))
    assert any(not torch.equal(a, b) for a, b in zip(d_before, disc.parameters()))


def test_train_gain_stopping_hook_ends_early():
    rng, data, mask, gen, disc = _setup()
    cfg = GAINConfig(iterations=100, batch_size=16)

    history = train_gain(
        gen, disc, data, mask, cfg, rng, torch.device("cpu"), stopping=lambda h: len(h) >= 5
    )
    assert len(history) == 5


def test_train_gain_shape_mismatch():
    rng, data, mask, gen, disc = _setup()
    with pytest.raises(ValueError):
        train_gain(gen, disc, data, mask[:, :2], GAINConfig(iterations=1), rng, torch.device("cpu"))


def test_loss_history_frame():
    frame = _history([0.3, 0.2]).to_frame()
    assert list(frame.columns) == ["iteration", "G_loss", "D_loss", "MSE_loss"]
    assert frame["iteration"].tolist() == [1, 2]


def test_loss_plateau_fires_on_flat_curve_only():
    stop = LossPlateau(window=10, tol=1e-3, min_iterations=20)

    assert not stop(_history([0.1] * 19))
    assert stop(_history([0.1] * 20))
    assert not stop(_history(np.linspace(1.0, 0.1, 40).tolist()))


def test_loss_plateau_rejects_bad_window():
    with pytest.raises(ValueError):
        LossPlateau(window=0)
