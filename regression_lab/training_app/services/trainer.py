"""
Training controller for the regression network.

State machine: IDLE -> TRAINING -> TRAINED, or back to IDLE when the
network reports a failure. Only one run may be in flight. A run works on
the dataset snapshot and config taken when it starts.
"""
import math
import threading
import uuid
from concurrent.futures import Future
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Sequence

from django.conf import settings

from shared.metrics import regression_report
from shared.utils import get_logger
from shared.utils.exceptions import (
    ValidationError,
    TrainingError,
    InsufficientDataError,
    AlreadyTrainingError,
)
from .network import ModelHandle, NetworkBackend

logger = get_logger(__name__)

MIN_TRAINING_SAMPLES = 4
INPUT_SHAPE = 2
OUTPUT_SHAPE = 1


def _positive_int(value: Any, name: str) -> int:
    try:
        number = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a positive integer, got {value!r}")
    if isinstance(value, bool) or not math.isfinite(number) or number != int(number) or number < 1:
        raise ValidationError(f"{name} must be a positive integer, got {value!r}")
    return int(number)


def _positive_float(value: Any, name: str) -> float:
    try:
        number = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a positive number, got {value!r}")
    if isinstance(value, bool) or not math.isfinite(number) or number <= 0:
        raise ValidationError(f"{name} must be a positive number, got {value!r}")
    return number


@dataclass(frozen=True)
class TrainingConfig:
    """Hyperparameters chosen by the user. Frozen, so a run's copy never changes."""
    epochs: int = 50
    learning_rate: float = 0.2
    hidden_units: int = 16
    
    def __post_init__(self):
        _positive_int(self.epochs, 'epochs')
        _positive_float(self.learning_rate, 'learning_rate')
        _positive_int(self.hidden_units, 'hidden_units')
    
    @classmethod
    def from_values(cls, epochs: Any, learning_rate: Any, hidden_units: Any) -> 'TrainingConfig':
        """Build a config from raw form or JSON values."""
        return cls(
            epochs=_positive_int(epochs, 'epochs'),
            learning_rate=_positive_float(learning_rate, 'learning_rate'),
            hidden_units=_positive_int(hidden_units, 'hidden_units'),
        )
    
    @classmethod
    def from_settings(cls) -> 'TrainingConfig':
        """Defaults from settings.REGRESSION_LAB."""
        defaults = getattr(settings, 'REGRESSION_LAB', {})
        return cls.from_values(
            defaults.get('EPOCHS', cls.epochs),
            defaults.get('LEARNING_RATE', cls.learning_rate),
            defaults.get('HIDDEN_UNITS', cls.hidden_units),
        )
    
    def hyperparameters(self) -> Dict[str, Any]:
        return {
            'hidden_units': self.hidden_units,
            'learning_rate': self.learning_rate,
        }
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            'epochs': self.epochs,
            'learning_rate': self.learning_rate,
            'hidden_units': self.hidden_units,
        }


class TrainingState(str, Enum):
    IDLE = 'idle'
    TRAINING = 'training'
    TRAINED = 'trained'


@dataclass
class TrainingRun:
    """
    Record of one training run.
    
    Attributes:
        run_id: Short unique identifier
        config: Config snapshot the run was started with
        sample_count: Number of samples in the training snapshot
        status: 'running', 'completed' or 'failed'
        losses: Per-epoch loss history (normalized units)
        metrics: In-sample regression metrics after completion
        error_message: Failure reason, if any
        handle_id: Id of the network this run trains
    """
    run_id: str
    config: TrainingConfig
    sample_count: int
    status: str = 'running'
    started_at: datetime = field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None
    losses: List[float] = field(default_factory=list)
    metrics: Dict[str, float] = field(default_factory=dict)
    error_message: Optional[str] = None
    handle_id: Optional[str] = None
    _finished: threading.Event = field(default_factory=threading.Event, repr=False, compare=False)
    
    @property
    def finished(self) -> bool:
        return self._finished.is_set()
    
    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the run completes or fails. Returns False on timeout."""
        return self._finished.wait(timeout)
    
    def mark_finished(self) -> None:
        """Release everyone blocked in wait()."""
        self._finished.set()
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            'run_id': self.run_id,
            'status': self.status,
            'config': self.config.to_dict(),
            'sample_count': self.sample_count,
            'started_at': self.started_at.isoformat(),
            'completed_at': self.completed_at.isoformat() if self.completed_at else None,
            'epochs_completed': len(self.losses),
            'final_loss': self.losses[-1] if self.losses else None,
            'metrics': self.metrics,
            'error': self.error_message,
        }


class TrainingController:
    """
    Starts training runs and owns the live ModelHandle.
    
    Starting a run or loading a model replaces the current handle. While
    a run is in flight the handle is marked is_training and prediction is
    refused. Completion and failure arrive through the network future's
    done callback, on the training thread.
    """
    
    def __init__(
        self,
        backend: NetworkBackend,
        on_trained: Optional[Callable[[ModelHandle], None]] = None,
        on_failed: Optional[Callable[[TrainingRun], None]] = None
    ):
        self.backend = backend
        self.on_trained = on_trained
        self.on_failed = on_failed
        self._lock = threading.RLock()
        self._state = TrainingState.IDLE
        self._handle: Optional[ModelHandle] = None
        self._last_run: Optional[TrainingRun] = None
    
    @property
    def state(self) -> TrainingState:
        return self._state
    
    @property
    def handle(self) -> Optional[ModelHandle]:
        return self._handle
    
    @property
    def last_run(self) -> Optional[TrainingRun]:
        return self._last_run
    
    def start_training(self, dataset, config: TrainingConfig) -> TrainingRun:
        """
        Start an asynchronous training run.
        
        Args:
            dataset: DatasetStore (or anything with samples()); read once here
            config: Hyperparameters, captured as-is for this run
        
        Returns:
            The TrainingRun record, status 'running' until the network
            reports back
        
        Raises:
            AlreadyTrainingError: If a run is in flight
            InsufficientDataError: If the dataset has fewer than 4 samples
            TrainingError: If the network could not be set up
        """
        samples = tuple(dataset.samples())
        
        with self._lock:
            if self._state is TrainingState.TRAINING:
                raise AlreadyTrainingError("A training run is already in progress.")
            if len(samples) < MIN_TRAINING_SAMPLES:
                raise InsufficientDataError(
                    f"Add at least {MIN_TRAINING_SAMPLES} data points to train "
                    f"(have {len(samples)})."
                )
            
            run = TrainingRun(
                run_id=str(uuid.uuid4())[:8],
                config=config,
                sample_count=len(samples),
            )
            self._last_run = run
            self._state = TrainingState.TRAINING
            self._handle = None
        
        logger.info(
            f"Starting training run {run.run_id} on {len(samples)} samples "
            f"({config.epochs} epochs, lr={config.learning_rate}, hidden={config.hidden_units})"
        )
        
        handle = None
        try:
            handle = self.backend.configure(
                INPUT_SHAPE, OUTPUT_SHAPE, task='regression',
                hyperparameters=config.hyperparameters()
            )
            for sample in samples:
                self.backend.ingest(handle, list(sample.inputs), [sample.output])
            self.backend.normalize(handle)
            handle.is_training = True
            with self._lock:
                run.handle_id = handle.handle_id
                self._handle = handle
            future = self.backend.train_async(handle, config.epochs)
        except Exception as e:
            self._fail(run, handle, e)
            raise TrainingError(f"Training failed to start: {e}") from e
        
        future.add_done_callback(partial(self._on_training_done, run, handle, samples))
        return run
    
    def _on_training_done(
        self,
        run: TrainingRun,
        handle: ModelHandle,
        samples: Sequence,
        future: Future
    ) -> None:
        error = future.exception()
        if error is not None:
            self._fail(run, handle, error)
            return
        
        try:
            losses = list(future.result())
            predictions = [self.backend.predict(handle, list(s.inputs)) for s in samples]
            metrics = regression_report([s.output for s in samples], predictions)
        except Exception as e:
            self._fail(run, handle, e)
            return
        
        with self._lock:
            handle.is_training = False
            handle.is_trained = True
            run.losses = losses
            run.metrics = metrics
            run.status = 'completed'
            run.completed_at = datetime.now()
            self._state = TrainingState.TRAINED
        
        logger.info(
            f"Training run {run.run_id} complete: final loss "
            f"{losses[-1] if losses else float('nan'):.6f}, r2={metrics['r2']:.4f}"
        )
        try:
            if self.on_trained is not None:
                self.on_trained(handle)
        finally:
            run.mark_finished()
    
    def _fail(self, run: TrainingRun, handle: Optional[ModelHandle], error: BaseException) -> None:
        with self._lock:
            if handle is not None:
                handle.is_training = False
            run.status = 'failed'
            run.error_message = str(error) or type(error).__name__
            run.completed_at = datetime.now()
            self._state = TrainingState.IDLE
        
        logger.error(f"Training run {run.run_id} failed: {run.error_message}")
        try:
            if self.on_failed is not None:
                self.on_failed(run)
        finally:
            run.mark_finished()
    
    def run_for(self, handle: Optional[ModelHandle]) -> Optional[TrainingRun]:
        """The completed run that produced handle, or None for a loaded model."""
        run = self._last_run
        if handle is None or run is None or run.status != 'completed':
            return None
        return run if run.handle_id == handle.handle_id else None
    
    def adopt(self, handle: ModelHandle) -> None:
        """
        Make a restored, trained handle the live model.
        
        Raises:
            AlreadyTrainingError: If a run is in flight
        """
        with self._lock:
            if self._state is TrainingState.TRAINING:
                raise AlreadyTrainingError("Cannot load a model while training is in progress.")
            handle.is_training = False
            handle.is_trained = True
            self._handle = handle
            self._state = TrainingState.TRAINED
        
        logger.info(f"Loaded network {handle.handle_id} as the live model")
        if self.on_trained is not None:
            self.on_trained(handle)
    
    def predictor(self) -> Optional[Callable[[float, float], float]]:
        """Callable (input1, input2) -> output for the live model, if trained."""
        handle = self._handle
        if self._state is not TrainingState.TRAINED or handle is None or not handle.is_trained:
            return None
        return lambda input1, input2: self.backend.predict(handle, [input1, input2])
