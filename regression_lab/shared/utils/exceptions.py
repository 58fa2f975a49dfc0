"""
Custom exceptions for the regression lab.
"""


class RegressionLabError(Exception):
    """Base exception for the regression lab."""
    pass


class DataError(RegressionLabError):
    """Exception raised during dataset operations."""
    pass


class ValidationError(DataError):
    """A numeric input is missing or not a finite number."""
    pass


class EmptyDatasetError(DataError):
    """The operation needs at least one sample."""
    pass


class TrainingError(RegressionLabError):
    """Exception raised during model training."""
    pass


class InsufficientDataError(TrainingError):
    """Too few samples to start training."""
    pass


class AlreadyTrainingError(TrainingError):
    """A training run is already in flight."""
    pass


class InferenceError(RegressionLabError):
    """Exception raised during inference."""
    pass


class ModelNotReadyError(InferenceError):
    """No trained model is available for prediction."""
    pass


class InvalidInputError(InferenceError):
    """A prediction input is not a finite number."""
    pass


class PredictionError(InferenceError):
    """The network reported a failure while predicting."""
    pass


class ModelRegistryError(RegressionLabError):
    """Exception raised during model registry operations."""
    pass
