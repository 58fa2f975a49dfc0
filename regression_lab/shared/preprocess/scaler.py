"""
Min-max normalization for network inputs and outputs.
"""
import numpy as np
from typing import Optional, Dict, Any


class MinMaxScaler:
    """
    Min-max scaler that maps each column into ``feature_range``.

    Constant columns get a unit range so they map to the lower bound
    instead of dividing by zero.
    """
    
    def __init__(self, feature_range: tuple = (0.0, 1.0)):
        self.feature_range = feature_range
        self.min_: Optional[np.ndarray] = None
        self.max_: Optional[np.ndarray] = None
        self.scale_: Optional[np.ndarray] = None
        self.fitted = False
    
    def fit(self, X: np.ndarray) -> 'MinMaxScaler':
        """Fit the scaler to data."""
        X = np.asarray(X, dtype=np.float64)
        if X.ndim == 1:
            X = X.reshape(-1, 1)
        self.min_ = np.min(X, axis=0)
        self.max_ = np.max(X, axis=0)
        data_range = self.max_ - self.min_
        data_range[data_range == 0] = 1.0
        self.scale_ = (self.feature_range[1] - self.feature_range[0]) / data_range
        self.fitted = True
        return self
    
    def transform(self, X: np.ndarray) -> np.ndarray:
        """Transform data to the fitted range."""
        if not self.fitted:
            raise ValueError("Scaler not fitted. Call fit() first.")
        X = np.asarray(X, dtype=np.float64)
        return (X - self.min_) * self.scale_ + self.feature_range[0]
    
    def fit_transform(self, X: np.ndarray) -> np.ndarray:
        """Fit and transform data."""
        self.fit(X)
        return self.transform(X)
    
    def inverse_transform(self, X: np.ndarray) -> np.ndarray:
        """Map scaled values back to original units."""
        if not self.fitted:
            raise ValueError("Scaler not fitted. Call fit() first.")
        X = np.asarray(X, dtype=np.float64)
        return (X - self.feature_range[0]) / self.scale_ + self.min_
    
    def to_dict(self) -> Dict[str, Any]:
        """Serialize scaler to plain Python values."""
        return {
            'type': 'MinMaxScaler',
            'min': self.min_.tolist() if self.min_ is not None else None,
            'max': self.max_.tolist() if self.max_ is not None else None,
            'scale': self.scale_.tolist() if self.scale_ is not None else None,
            'feature_range': [float(v) for v in self.feature_range],
            'fitted': self.fitted,
        }
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MinMaxScaler':
        """Deserialize scaler from dictionary."""
        scaler = cls(feature_range=tuple(data.get('feature_range', (0.0, 1.0))))
        scaler.min_ = np.array(data['min']) if data['min'] is not None else None
        scaler.max_ = np.array(data['max']) if data['max'] is not None else None
        scaler.scale_ = np.array(data['scale']) if data['scale'] is not None else None
        scaler.fitted = data.get('fitted', False)
        return scaler
