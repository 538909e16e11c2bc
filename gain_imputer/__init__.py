# GAIN - Generative Adversarial Imputation Nets for numeric tables

from .config import GAINConfig, load_config
from .imputer import GAINImputer, ImputationResult
from .metrics import evaluate_imputation, rmse_loss
from .missingness import inject_missingness, mask_from_data
from .training import LossHistory, LossPlateau

__version__ = "0.1.0"
__all__ = [
    "GAINConfig",
    "GAINImputer",
    "ImputationResult",
    "LossHistory",
    "LossPlateau",
    "evaluate_imputation",
    "inject_missingness",
    "load_config",
    "mask_from_data",
    "rmse_loss",
]
