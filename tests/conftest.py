import numpy as np
import pandas as pd
import pytest

from gain_imputer import GAINConfig


@pytest.fixture
def mvn_frame():
    """2000x4 correlated multivariate normal table (complete)."""
    rng = np.random.default_rng(7)
    cov = np.array(
        [
            [1.0, 0.8, 0.5, 0.3],
            [0.8, 2.0, 0.6, 0.4],
            [0.5, 0.6, 1.5, 0.2],
            [0.3, 0.4, 0.2, 3.0],
        ]
    )
    data = rng.multivariate_normal([0.0, 5.0, -3.0, 10.0], cov, size=2000)
    return pd.DataFrame(data, columns=["a", "b", "c", "d"])


@pytest.fixture
def small_frame():
    rng = np.random.default_rng(3)
    data = rng.normal(size=(120, 3)) * [1.0, 10.0, 0.1] + [0.0, 50.0, -2.0]
    df = pd.DataFrame(data, columns=["u", "v", "w"])
    missing = rng.uniform(size=df.shape) < 0.2
    return df.mask(missing)


@pytest.fixture
def fast_config():
    return GAINConfig(iterations=30, batch_size=32, seed=0)
