from django.db import models


class ModelArtifact(models.Model):
    """
    A saved regression network.
    
    Attributes:
        version: Unique version identifier (major.minor.patch)
        model_file: Path to the serialized network
        file_hash: SHA256 hash of model file for verification
        metadata: JSON metadata (hyperparameters, sample count, source)
        metrics: JSON in-sample metrics of the run that produced it
        created_at: Timestamp of creation
    """
    
    version = models.CharField(max_length=50, unique=True)
    model_file = models.CharField(max_length=500)
    file_hash = models.CharField(max_length=64)
    metadata = models.JSONField(default=dict)
    metrics = models.JSONField(default=dict)
    created_at = models.DateTimeField(auto_now_add=True)
    
    class Meta:
        ordering = ['-created_at', '-id']
        verbose_name = 'Model Artifact'
        verbose_name_plural = 'Model Artifacts'
    
    def __str__(self):
        return f"regression network v{self.version}"
    
    @classmethod
    def get_next_version(cls, base_version=None):
        """
        Next patch version after base_version, or after the latest saved
        model when no base is given.
        """
        if base_version:
            major, minor, patch = (int(p) for p in base_version.split('.'))
            return f"{major}.{minor}.{patch + 1}"
        
        latest = cls.objects.order_by('-created_at', '-id').first()
        if latest:
            return cls.get_next_version(latest.version)
        
        return "1.0.0"
