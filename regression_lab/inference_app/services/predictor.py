"""
Prediction controller: validates inputs and asks the network for an output.
"""
import math
from concurrent.futures import TimeoutError as FuturesTimeoutError
from typing import Any, Optional

from dataset_app.services import parse_number
from shared.utils import get_logger
from shared.utils.exceptions import (
    ValidationError,
    ModelNotReadyError,
    InvalidInputError,
    PredictionError,
)
from training_app.services import ModelHandle, NetworkBackend

logger = get_logger(__name__)


def format_prediction(value: float) -> str:
    """Display text for a predicted value."""
    return f"Predicted Output: {value:.4f}"


class Predictor:
    """
    Pass-through to the network with validation.
    
    Each call makes exactly one network request; nothing is cached or
    retried. Calls may run concurrently against the same handle.
    """
    
    def __init__(self, backend: NetworkBackend, timeout: Optional[float] = None):
        """
        Args:
            backend: Network collaborator
            timeout: Seconds to wait for a prediction (None waits forever)
        """
        self.backend = backend
        self.timeout = timeout
    
    def predict(self, input1: Any, input2: Any, handle: Optional[ModelHandle]) -> float:
        """
        Predict the output for one pair of inputs.
        
        Raises:
            ModelNotReadyError: If there is no trained, idle model
            InvalidInputError: If either input is not a finite number
            PredictionError: If the network fails or times out
        """
        if handle is None or not handle.is_trained or handle.is_training:
            raise ModelNotReadyError("Train the model first.")
        
        try:
            inputs = [parse_number(input1, 'input1'), parse_number(input2, 'input2')]
        except ValidationError as e:
            raise InvalidInputError(str(e)) from e
        
        future = self.backend.predict_async(handle, inputs)
        try:
            value = future.result(timeout=self.timeout)
        except FuturesTimeoutError as e:
            logger.error(f"Prediction for {inputs} timed out after {self.timeout}s")
            raise PredictionError("Prediction timed out.") from e
        except Exception as e:
            logger.error(f"Prediction for {inputs} failed: {e}")
            raise PredictionError(f"Error in prediction: {e}") from e

        if not math.isfinite(value):
            logger.error(f"Prediction for {inputs} returned {value}")
            raise PredictionError(f"Error in prediction: network returned {value}")

        logger.info(f"Predicted {value:.4f} for inputs {inputs}")
        return float(value)
