from .network import NetworkBackend, ModelHandle, RegressionNetwork, TorchMLP
from .trainer import (
    TrainingController,
    TrainingConfig,
    TrainingRun,
    TrainingState,
    MIN_TRAINING_SAMPLES,
)

__all__ = [
    'NetworkBackend',
    'ModelHandle',
    'RegressionNetwork',
    'TorchMLP',
    'TrainingController',
    'TrainingConfig',
    'TrainingRun',
    'TrainingState',
    'MIN_TRAINING_SAMPLES',
]
