from django.shortcuts import render, redirect
from django.http import FileResponse, JsonResponse
from django.views.decorators.http import require_http_methods
from django.contrib import messages

from shared.utils import get_logger
from shared.utils.exceptions import ModelRegistryError, TrainingError
from workbench.state import get_app_state
from .services import ModelRegistry

logger = get_logger(__name__)


def index(request):
    """Saved models page."""
    context = {
        'models': ModelRegistry().list_versions(),
    }
    return render(request, 'model_registry/index.html', context)


@require_http_methods(["POST"])
def save_model(request):
    """Save the live model to the registry."""
    state = get_app_state()
    handle = state.model
    if handle is None or not handle.is_trained or handle.is_training:
        messages.error(request, 'Train the model first.')
        return redirect('workbench:index')
    
    # only a model trained here carries run provenance
    run = state.trainer.run_for(handle)
    metadata = {
        'hyperparameters': handle.hyperparameters,
        'sample_count': run.sample_count if run else None,
        'run_id': run.run_id if run else None,
    }
    try:
        artifact = ModelRegistry().save(
            state.backend.persist(handle),
            metrics=run.metrics if run else {},
            metadata=metadata,
        )
    except ModelRegistryError as e:
        messages.error(request, f'Save failed: {e}')
        return redirect('workbench:index')
    
    messages.success(request, f'Model saved as version {artifact.version}')
    return redirect('model_registry:index')


@require_http_methods(["POST"])
def load_model(request, version):
    """Make a saved model the live model."""
    state = get_app_state()
    try:
        artifact = ModelRegistry().load(version)
        state.load_model(state.backend.restore(artifact))
    except (ModelRegistryError, TrainingError) as e:
        messages.error(request, f'Load failed: {e}')
        return redirect('model_registry:index')
    except Exception as e:
        logger.error(f"Model version {version} could not be restored: {e}")
        messages.error(request, f'Load failed: model file is not a valid network ({e})')
        return redirect('model_registry:index')
    
    messages.success(request, f'Loaded model version {version}')
    return redirect('workbench:index')


@require_http_methods(["POST"])
def delete_model(request, version):
    """Remove a saved model and its file."""
    try:
        ModelRegistry().delete(version)
    except ModelRegistryError as e:
        messages.error(request, f'Delete failed: {e}')
        return redirect('model_registry:index')
    
    messages.success(request, f'Deleted model version {version}')
    return redirect('model_registry:index')


def download(request, version):
    """Download the raw model file."""
    try:
        artifact = ModelRegistry().get_artifact(version)
        handle = open(artifact.model_file, 'rb')
    except (ModelRegistryError, OSError) as e:
        messages.error(request, f'Download failed: {e}')
        return redirect('model_registry:index')
    
    filename = f"model_{version.replace('.', '_')}.pt"
    return FileResponse(handle, as_attachment=True, filename=filename)


@require_http_methods(["POST"])
def upload(request):
    """Load a model file from disk and register it."""
    uploaded = request.FILES.get('file')
    if not uploaded:
        messages.error(request, 'Choose a model file to upload')
        return redirect('model_registry:index')
    
    state = get_app_state()
    content = uploaded.read()
    try:
        handle = state.backend.restore(content)
        state.load_model(handle)
    except TrainingError as e:
        messages.error(request, f'Load failed: {e}')
        return redirect('model_registry:index')
    except Exception as e:
        logger.error(f"Uploaded file '{uploaded.name}' could not be restored: {e}")
        messages.error(request, 'Load failed: file is not a valid model')
        return redirect('model_registry:index')
    
    artifact = ModelRegistry().save(content, metadata={
        'hyperparameters': handle.hyperparameters,
        'source': uploaded.name,
    })
    messages.success(request, f'Loaded {uploaded.name} (saved as version {artifact.version})')
    return redirect('workbench:index')


def api_list(request):
    """API endpoint to list saved models."""
    data = [
        {
            'version': m.version,
            'file_hash': m.file_hash,
            'metrics': m.metrics,
            'metadata': m.metadata,
            'created_at': m.created_at.isoformat(),
        }
        for m in ModelRegistry().list_versions()
    ]
    return JsonResponse({'models': data})
