"""
Preprocessing module for the regression lab.
"""
from .scaler import MinMaxScaler

__all__ = [
    'MinMaxScaler',
]
