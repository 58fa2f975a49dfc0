"""
Regression metrics reported after a training run.
"""
import numpy as np
from typing import Dict


def _as_vectors(y_true, y_pred):
    y_true = np.asarray(y_true, dtype=np.float64).ravel()
    y_pred = np.asarray(y_pred, dtype=np.float64).ravel()
    if y_true.shape != y_pred.shape:
        raise ValueError(
            f"Shape mismatch: {y_true.shape[0]} targets vs {y_pred.shape[0]} predictions"
        )
    return y_true, y_pred


def mae(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """Mean absolute error."""
    y_true, y_pred = _as_vectors(y_true, y_pred)
    return float(np.mean(np.abs(y_true - y_pred)))


def mse(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """Mean squared error."""
    y_true, y_pred = _as_vectors(y_true, y_pred)
    return float(np.mean((y_true - y_pred) ** 2))


def rmse(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """Root mean squared error."""
    return float(np.sqrt(mse(y_true, y_pred)))


def r2_score(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """
    Coefficient of determination.
    
    Returns 0.0 when the targets are constant, where R² is undefined.
    """
    y_true, y_pred = _as_vectors(y_true, y_pred)
    
    ss_res = np.sum((y_true - y_pred) ** 2)
    ss_tot = np.sum((y_true - np.mean(y_true)) ** 2)
    
    if ss_tot == 0:
        return 0.0
    
    return float(1 - (ss_res / ss_tot))


def regression_report(y_true: np.ndarray, y_pred: np.ndarray) -> Dict[str, float]:
    """
    All regression metrics in one dict.
    
    Args:
        y_true: Observed outputs
        y_pred: Model outputs for the same inputs
    
    Returns:
        Dict with mae, mse, rmse and r2
    """
    return {
        'mae': mae(y_true, y_pred),
        'mse': mse(y_true, y_pred),
        'rmse': rmse(y_true, y_pred),
        'r2': r2_score(y_true, y_pred),
    }
