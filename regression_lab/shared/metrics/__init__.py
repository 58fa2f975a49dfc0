"""
Metrics module for the regression lab.
"""
from .regression import mae, mse, rmse, r2_score, regression_report

__all__ = [
    'mae',
    'mse',
    'rmse',
    'r2_score',
    'regression_report',
]
