"""
Model Registry service for saved regression networks.
"""
import os
import hashlib
from typing import Optional, Dict, Any, List
from django.conf import settings

from model_registry.models import ModelArtifact
from shared.utils import get_logger
from shared.utils.exceptions import ModelRegistryError

logger = get_logger(__name__)


class ModelRegistry:
    """
    Stores opaque model artifacts on disk with a database record each.
    
    The registry never looks inside an artifact; it only writes the bytes,
    hashes them, and hands them back on load.
    """
    
    def __init__(self, models_dir: Optional[str] = None):
        """
        Initialize the registry.
        
        Args:
            models_dir: Directory to store model files
        """
        self.models_dir = models_dir or os.path.join(
            settings.MEDIA_ROOT, 'models'
        )
        os.makedirs(self.models_dir, exist_ok=True)
    
    def _compute_hash(self, filepath: str) -> str:
        """Compute SHA256 hash of a file."""
        sha256 = hashlib.sha256()
        with open(filepath, 'rb') as f:
            for chunk in iter(lambda: f.read(8192), b''):
                sha256.update(chunk)
        return sha256.hexdigest()
    
    def save(
        self,
        artifact: bytes,
        metrics: Optional[Dict[str, float]] = None,
        metadata: Optional[Dict[str, Any]] = None,
        version: Optional[str] = None,
    ) -> ModelArtifact:
        """
        Save a serialized network to the registry.
        
        Args:
            artifact: Bytes produced by NetworkBackend.persist()
            metrics: Metrics of the run that produced the model
            metadata: Optional metadata dict
            version: Optional explicit version (auto-generated if not provided)
        
        Returns:
            Created ModelArtifact instance
        """
        if not artifact:
            raise ModelRegistryError("Refusing to save an empty model artifact")
        
        if version is None:
            version = ModelArtifact.get_next_version()
        elif ModelArtifact.objects.filter(version=version).exists():
            raise ModelRegistryError(f"Model version {version} already exists")
        
        model_filename = f"model_{version.replace('.', '_')}.pt"
        model_filepath = os.path.join(self.models_dir, model_filename)
        
        with open(model_filepath, 'wb') as f:
            f.write(artifact)
        
        record = ModelArtifact.objects.create(
            version=version,
            model_file=model_filepath,
            file_hash=self._compute_hash(model_filepath),
            metadata=metadata or {},
            metrics=metrics or {},
        )
        
        logger.info(f"Saved model version {version} ({len(artifact)} bytes)")
        return record
    
    def load(self, version: str, verify_hash: bool = True) -> bytes:
        """
        Read a saved artifact back.
        
        Args:
            version: Model version to load
            verify_hash: Whether to verify file hash
        
        Returns:
            The artifact bytes
        """
        record = self.get_artifact(version)
        
        if not os.path.exists(record.model_file):
            raise ModelRegistryError(f"Model file for version {version} is missing")
        
        if verify_hash:
            current_hash = self._compute_hash(record.model_file)
            if current_hash != record.file_hash:
                raise ModelRegistryError(
                    f"Model file hash mismatch for version {version}. "
                    "File may have been modified."
                )
        
        with open(record.model_file, 'rb') as f:
            artifact = f.read()
        
        logger.info(f"Loaded model version {version}")
        return artifact
    
    def get_artifact(self, version: str) -> ModelArtifact:
        try:
            return ModelArtifact.objects.get(version=version)
        except ModelArtifact.DoesNotExist:
            raise ModelRegistryError(f"Model version {version} not found")
    
    def list_versions(self, limit: int = 100) -> List[ModelArtifact]:
        return list(ModelArtifact.objects.all()[:limit])
    
    def delete(self, version: str, delete_files: bool = True) -> None:
        """
        Delete a model from the registry.
        
        Args:
            version: Model version to delete
            delete_files: Whether to delete the model file
        """
        record = self.get_artifact(version)
        
        if delete_files and os.path.exists(record.model_file):
            os.remove(record.model_file)
        
        record.delete()
        logger.info(f"Deleted model version {version}")
