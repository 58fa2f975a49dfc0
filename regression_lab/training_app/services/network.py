"""
PyTorch regression network behind an asynchronous, handle-based interface.

NetworkBackend is the only place that touches torch. Callers configure a
handle, feed it samples one at a time, normalize, then train or predict
through futures:

    handle = backend.configure(2, 1, 'regression', {'hidden_units': 16})
    backend.ingest(handle, [1.0, 2.0], [3.0])
    backend.normalize(handle)
    losses = backend.train_async(handle, epochs=50).result()
    y = backend.predict(handle, [1.5, 0.0])
"""
import io
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import torch
import torch.nn as nn
import torch.optim as optim
from torch.utils.data import DataLoader as TorchDataLoader, TensorDataset

from shared.preprocess import MinMaxScaler
from shared.utils import get_logger, Timer

logger = get_logger(__name__)

ARTIFACT_FORMAT = 'regression-lab-mlp/1'

DEFAULT_HYPERPARAMETERS = {
    'hidden_units': 16,
    'learning_rate': 0.2,
    'batch_size': 32,
}


class TorchMLP(nn.Module):
    """MLP with ReLU hidden layers and a linear output."""
    
    def __init__(
        self,
        input_dim: int,
        hidden_dims: Sequence[int] = (16,),
        output_dim: int = 1
    ):
        super().__init__()
        
        layers = []
        prev_dim = input_dim
        
        for hidden_dim in hidden_dims:
            layers.extend([
                nn.Linear(prev_dim, hidden_dim),
                nn.ReLU(),
            ])
            prev_dim = hidden_dim
        
        layers.append(nn.Linear(prev_dim, output_dim))
        
        self.network = nn.Sequential(*layers)
    
    def forward(self, x):
        return self.network(x)


class RegressionNetwork:
    """
    Training data buffer, min-max scalers and MLP for one model.
    
    Rows are collected with add_data(), scaled into [0, 1] by
    normalize_data(), and the network trains and predicts in that scaled
    space. Predictions are mapped back to output units.
    """
    
    def __init__(
        self,
        input_dim: int,
        output_dim: int,
        hidden_units: int,
        learning_rate: float,
        batch_size: int = 32
    ):
        self.input_dim = input_dim
        self.output_dim = output_dim
        self.hidden_units = hidden_units
        self.learning_rate = learning_rate
        self.batch_size = batch_size
        self.device = torch.device('cuda' if torch.cuda.is_available() else 'cpu')
        self.model = TorchMLP(input_dim, [hidden_units], output_dim).to(self.device)
        self.input_scaler = MinMaxScaler()
        self.output_scaler = MinMaxScaler()
        self.normalized = False
        self._inputs: List[List[float]] = []
        self._outputs: List[List[float]] = []
    
    @property
    def row_count(self) -> int:
        return len(self._inputs)
    
    def add_data(self, inputs: Sequence[float], outputs: Sequence[float]) -> None:
        if len(inputs) != self.input_dim:
            raise ValueError(f"Expected {self.input_dim} inputs, got {len(inputs)}")
        if len(outputs) != self.output_dim:
            raise ValueError(f"Expected {self.output_dim} outputs, got {len(outputs)}")
        self._inputs.append([float(v) for v in inputs])
        self._outputs.append([float(v) for v in outputs])
        self.normalized = False
    
    def normalize_data(self) -> None:
        if not self._inputs:
            raise ValueError("No data to normalize. Add data first.")
        self.input_scaler.fit(np.array(self._inputs))
        self.output_scaler.fit(np.array(self._outputs))
        self.normalized = True
    
    def train(self, epochs: int) -> List[float]:
        """
        Fit the network on the collected rows.
        
        Returns:
            Mean MSE loss per epoch, in normalized units
        """
        if not self.normalized:
            raise ValueError("Data not normalized. Call normalize_data() first.")
        
        X = self.input_scaler.transform(np.array(self._inputs))
        y = self.output_scaler.transform(np.array(self._outputs))
        
        X_t = torch.FloatTensor(X).to(self.device)
        y_t = torch.FloatTensor(y).to(self.device)
        loader = TorchDataLoader(
            TensorDataset(X_t, y_t), batch_size=self.batch_size, shuffle=True
        )
        
        optimizer = optim.Adam(self.model.parameters(), lr=self.learning_rate)
        criterion = nn.MSELoss()
        losses = []
        
        with Timer(f"network training ({len(X)} rows, {epochs} epochs)"):
            self.model.train()
            for epoch in range(epochs):
                epoch_loss = 0.0
                for batch_X, batch_y in loader:
                    optimizer.zero_grad()
                    loss = criterion(self.model(batch_X), batch_y)
                    loss.backward()
                    optimizer.step()
                    epoch_loss += loss.item() * len(batch_X)
                losses.append(epoch_loss / len(X))
                logger.debug(f"epoch {epoch + 1}/{epochs} loss={losses[-1]:.6f}")
            self.model.eval()
        
        return losses
    
    def predict(self, inputs: Sequence[float]) -> List[float]:
        if not self.normalized:
            raise ValueError("Model has no normalization. Train or load a model first.")
        if len(inputs) != self.input_dim:
            raise ValueError(f"Expected {self.input_dim} inputs, got {len(inputs)}")
        
        X = self.input_scaler.transform(np.array([inputs], dtype=np.float64))
        with torch.no_grad():
            y = self.model(torch.FloatTensor(X).to(self.device)).cpu().numpy()
        return self.output_scaler.inverse_transform(y)[0].tolist()
    
    def to_payload(self) -> Dict[str, Any]:
        return {
            'format': ARTIFACT_FORMAT,
            'input_dim': self.input_dim,
            'output_dim': self.output_dim,
            'hidden_units': self.hidden_units,
            'learning_rate': self.learning_rate,
            'batch_size': self.batch_size,
            'state_dict': {k: v.cpu() for k, v in self.model.state_dict().items()},
            'input_scaler': self.input_scaler.to_dict(),
            'output_scaler': self.output_scaler.to_dict(),
        }
    
    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> 'RegressionNetwork':
        if payload.get('format') != ARTIFACT_FORMAT:
            raise ValueError(f"Unsupported model artifact format: {payload.get('format')!r}")
        network = cls(
            input_dim=payload['input_dim'],
            output_dim=payload['output_dim'],
            hidden_units=payload['hidden_units'],
            learning_rate=payload['learning_rate'],
            batch_size=payload.get('batch_size', 32),
        )
        network.model.load_state_dict(payload['state_dict'])
        network.model.eval()
        network.input_scaler = MinMaxScaler.from_dict(payload['input_scaler'])
        network.output_scaler = MinMaxScaler.from_dict(payload['output_scaler'])
        network.normalized = True
        return network


@dataclass
class ModelHandle:
    """
    Opaque reference to one network plus its status pair.
    
    The status flags are owned by the TrainingController; the backend
    never changes them.
    """
    network: RegressionNetwork
    hyperparameters: Dict[str, Any] = field(default_factory=dict)
    is_trained: bool = False
    is_training: bool = False
    handle_id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])


class NetworkBackend:
    """
    Asynchronous front end to RegressionNetwork.
    
    Training runs on a single worker thread; predictions run on a small
    pool of their own so they can be issued concurrently.
    """
    
    SUPPORTED_TASKS = ('regression',)
    
    def __init__(self, prediction_workers: int = 4):
        self._train_executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix='network-train'
        )
        self._predict_executor = ThreadPoolExecutor(
            max_workers=prediction_workers, thread_name_prefix='network-predict'
        )
    
    def configure(
        self,
        input_shape: int,
        output_shape: int,
        task: str = 'regression',
        hyperparameters: Optional[Dict[str, Any]] = None
    ) -> ModelHandle:
        """Create a fresh, untrained network."""
        if task not in self.SUPPORTED_TASKS:
            raise ValueError(f"Unsupported task: {task}")
        
        params = dict(DEFAULT_HYPERPARAMETERS)
        params.update(hyperparameters or {})
        network = RegressionNetwork(
            input_dim=input_shape,
            output_dim=output_shape,
            hidden_units=int(params['hidden_units']),
            learning_rate=float(params['learning_rate']),
            batch_size=int(params['batch_size']),
        )
        handle = ModelHandle(network=network, hyperparameters=params)
        logger.info(
            f"Configured network {handle.handle_id}: {input_shape} -> "
            f"{params['hidden_units']} -> {output_shape} ({task})"
        )
        return handle
    
    def ingest(self, handle: ModelHandle, inputs: Sequence[float], outputs: Sequence[float]) -> None:
        handle.network.add_data(inputs, outputs)
    
    def normalize(self, handle: ModelHandle) -> None:
        handle.network.normalize_data()
    
    def train_async(self, handle: ModelHandle, epochs: int) -> Future:
        """Start training; the future resolves to the per-epoch loss history."""
        return self._train_executor.submit(handle.network.train, epochs)
    
    def predict(self, handle: ModelHandle, inputs: Sequence[float]) -> float:
        return float(handle.network.predict(inputs)[0])
    
    def predict_async(self, handle: ModelHandle, inputs: Sequence[float]) -> Future:
        """The future resolves to the predicted output as a float."""
        return self._predict_executor.submit(self.predict, handle, list(inputs))
    
    def persist(self, handle: ModelHandle) -> bytes:
        """Serialize weights, scalers and hyperparameters."""
        buf = io.BytesIO()
        torch.save(handle.network.to_payload(), buf)
        return buf.getvalue()
    
    def restore(self, artifact: bytes) -> ModelHandle:
        """Rebuild a trained handle from persist() output."""
        payload = torch.load(io.BytesIO(artifact), map_location='cpu', weights_only=True)
        network = RegressionNetwork.from_payload(payload)
        handle = ModelHandle(
            network=network,
            hyperparameters={
                'hidden_units': network.hidden_units,
                'learning_rate': network.learning_rate,
                'batch_size': network.batch_size,
            },
            is_trained=True,
        )
        logger.info(f"Restored network {handle.handle_id}")
        return handle
    
    def shutdown(self, wait: bool = True) -> None:
        self._train_executor.shutdown(wait=wait)
        self._predict_executor.shutdown(wait=wait)
