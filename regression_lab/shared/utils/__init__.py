"""
Shared utilities module.
"""
from .logging_utils import get_logger
from .timer import Timer
from .exceptions import (
    RegressionLabError,
    DataError,
    ValidationError,
    EmptyDatasetError,
    TrainingError,
    InsufficientDataError,
    AlreadyTrainingError,
    InferenceError,
    ModelNotReadyError,
    InvalidInputError,
    PredictionError,
    ModelRegistryError,
)

__all__ = [
    'get_logger',
    'Timer',
    'RegressionLabError',
    'DataError',
    'ValidationError',
    'EmptyDatasetError',
    'TrainingError',
    'InsufficientDataError',
    'AlreadyTrainingError',
    'InferenceError',
    'ModelNotReadyError',
    'InvalidInputError',
    'PredictionError',
    'ModelRegistryError',
]
