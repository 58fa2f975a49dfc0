"""
Process-wide application state.

AppState is the single coordinating object: it owns the dataset, the
training controller (and through it the live model), the current
training config and the latest chart series. Views fetch it with
get_app_state().
"""
import threading
from typing import Optional

from django.conf import settings

from dataset_app.services import DatasetStore
from inference_app.services import Predictor
from shared.utils import get_logger
from shared.visualize import ChartSeries, project_chart
from training_app.services import (
    ModelHandle,
    NetworkBackend,
    TrainingConfig,
    TrainingController,
    TrainingRun,
)

logger = get_logger(__name__)


class AppState:
    """Everything the UI works against, wired together."""
    
    def __init__(self, backend: Optional[NetworkBackend] = None):
        options = getattr(settings, 'REGRESSION_LAB', {})
        self.backend = backend or NetworkBackend(
            prediction_workers=options.get('PREDICTION_WORKERS', 4)
        )
        self.store = DatasetStore()
        self.trainer = TrainingController(
            self.backend,
            on_trained=self._on_model_changed,
            on_failed=self._on_training_failed,
        )
        self.predictor = Predictor(self.backend, timeout=options.get('PREDICTION_TIMEOUT'))
        self._config = TrainingConfig.from_settings()
        self._chart = ChartSeries()
        self._chart_lock = threading.Lock()
        self.store.subscribe(self.refresh_chart)
    
    @property
    def config(self) -> TrainingConfig:
        return self._config
    
    def set_config(self, config: TrainingConfig) -> None:
        """Replace the config used by the next run. Runs in flight keep theirs."""
        self._config = config
        logger.info(f"Training config set to {config.to_dict()}")
    
    @property
    def model(self) -> Optional[ModelHandle]:
        return self.trainer.handle
    
    @property
    def chart(self) -> ChartSeries:
        return self._chart
    
    def refresh_chart(self) -> ChartSeries:
        """Recompute both chart series from the dataset and the live model."""
        with self._chart_lock:
            self._chart = project_chart(self.store.samples(), self.trainer.predictor())
            return self._chart
    
    def start_training(self) -> TrainingRun:
        run = self.trainer.start_training(self.store, self._config)
        # the old model is gone; drop its line right away
        self.refresh_chart()
        return run
    
    def predict(self, input1, input2) -> float:
        return self.predictor.predict(input1, input2, self.trainer.handle)
    
    def load_model(self, handle: ModelHandle) -> None:
        """Replace the live model with a restored one. Refused while training."""
        self.trainer.adopt(handle)
    
    def _on_model_changed(self, handle: ModelHandle) -> None:
        self.refresh_chart()
    
    def _on_training_failed(self, run: TrainingRun) -> None:
        self.refresh_chart()
    
    def status(self) -> dict:
        run = self.trainer.last_run
        handle = self.trainer.handle
        return {
            'state': self.trainer.state.value,
            'is_trained': bool(handle and handle.is_trained),
            'is_training': bool(handle and handle.is_training),
            'sample_count': self.store.count(),
            'config': self._config.to_dict(),
            'last_run': run.to_dict() if run else None,
        }
    
    def shutdown(self, wait: bool = True) -> None:
        self.backend.shutdown(wait=wait)


_state: Optional[AppState] = None
_state_lock = threading.Lock()


def get_app_state() -> AppState:
    """Return the process-wide AppState, creating it on first use."""
    global _state
    with _state_lock:
        if _state is None:
            _state = AppState()
        return _state


def reset_app_state(backend: Optional[NetworkBackend] = None) -> AppState:
    """Discard the current state and start fresh."""
    global _state
    with _state_lock:
        if _state is not None:
            _state.shutdown(wait=False)
        _state = AppState(backend=backend)
        return _state
