"""GAIN configuration.

Defaults follow the hyper-parameters published with GAIN
(Yoon, Jordon & van der Schaar, ICML 2018):

    batch_size=128, hint_rate=0.9, alpha=100, iterations=10000

Configurations can be stored as named profiles in a YAML file::

    default:
      iterations: 10000
    quick:
      iterations: 1000
      learning_rate: 0.002

and loaded with ``load_config("configs/gain.yaml:quick")``.
"""

from __future__ import annotations

import numbers
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


INIT_METHODS = ("xavier_normal", "xavier_uniform", "kaiming_normal", "normal")


def _positive_int(name: str, v: Any) -> int:
    if isinstance(v, bool) or not isinstance(v, numbers.Real) or int(v) != v or v <= 0:
        raise ValueError(f"{name} must be a positive integer, got {v!r}")
    return int(v)


@dataclass
class GAINConfig:
    """
    Hyper-parameters of one GAIN training + imputation run.

    ``missing_rate`` is only consumed by the optional missingness-injection
    stage (CLI ``--missing-rate``); the imputer itself never erases cells.
    """
    # Missingness injection
    missing_rate: float = 0.2

    # Training
    batch_size: int = 128
    hint_rate: float = 0.9
    alpha: float = 100.0            # Weight of the observed-cell reconstruction term
    iterations: int = 10000         # Fixed iteration count (no convergence check by default)
    learning_rate: float = 1e-3
    beta1: float = 0.9              # Adam momentum terms
    beta2: float = 0.999

    # Networks
    hidden_dim: Optional[int] = None    # None -> number of features
    init_method: str = "xavier_normal"

    # Numerics
    noise_scale: float = 0.01       # Missing cells are filled with U(0, noise_scale)
    epsilon: float = 1e-8           # Added inside every log

    # Post-processing
    round_threshold: int = 20       # Round columns with fewer distinct observed values

    # Runtime
    seed: Optional[int] = 42
    use_gpu: bool = False
    verbose: bool = False           # Progress bar and periodic loss lines
    print_loss_every: int = 1000
    plot: bool = False              # Convergence plot (CLI only)

    def validate(self) -> "GAINConfig":
        for name in ("missing_rate", "hint_rate"):
            v = float(getattr(self, name))
            if not 0.0 <= v <= 1.0:
                raise ValueError(f"{name} must be in [0,1], got {v}")
        # Counts may arrive as floats from YAML or JSON; store them as int.
        for name in ("batch_size", "iterations", "print_loss_every", "round_threshold"):
            setattr(self, name, _positive_int(name, getattr(self, name)))
        if self.hidden_dim is not None:
            self.hidden_dim = _positive_int("hidden_dim", self.hidden_dim)
        if self.seed is not None:
            if isinstance(self.seed, bool) or int(self.seed) != self.seed or self.seed < 0:
                raise ValueError(f"seed must be a non-negative integer or None, got {self.seed}")
            self.seed = int(self.seed)
        if self.learning_rate <= 0:
            raise ValueError(f"learning_rate must be positive, got {self.learning_rate}")
        for name in ("beta1", "beta2"):
            v = float(getattr(self, name))
            if not 0.0 <= v < 1.0:
                raise ValueError(f"{name} must be in [0,1), got {v}")
        if self.alpha < 0:
            raise ValueError(f"alpha must be non-negative, got {self.alpha}")
        if self.noise_scale < 0 or self.epsilon <= 0:
            raise ValueError("noise_scale must be >= 0 and epsilon > 0")
        if self.init_method not in INIT_METHODS:
            raise ValueError(
                f"Unsupported init_method '{self.init_method}'. Available: {list(INIT_METHODS)}"
            )
        return self

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "GAINConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(f"Unknown GAIN config keys: {unknown}. Available: {sorted(known)}")
        return cls(**values).validate()


def load_config(profile_spec: Optional[str], **overrides: Any) -> GAINConfig:
    """Load a config from ``'path.yaml:name'`` (profile defaults to ``default``).

    ``None`` gives the built-in defaults. Keyword overrides whose value is
    ``None`` are ignored so that unset CLI flags keep the profile value.
    """
    values: Dict[str, Any] = {}
    if profile_spec:
        path_str, _, name = profile_spec.partition(":")
        if not name:
            name = "default"
        with Path(path_str).open(encoding="utf-8") as f:
            profiles = yaml.safe_load(f) or {}
        if name not in profiles:
            raise ValueError(f"Profile '{name}' not found. Available: {list(profiles.keys())}")
        values.update(profiles[name] or {})

    values.update({k: v for k, v in overrides.items() if v is not None})
    return GAINConfig.from_dict(values)
