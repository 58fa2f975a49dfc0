from django.shortcuts import redirect
from django.http import JsonResponse
from django.views.decorators.http import require_http_methods
from django.views.decorators.csrf import csrf_exempt
from django.contrib import messages
import json

from shared.utils.exceptions import AlreadyTrainingError, TrainingError, ValidationError
from workbench.state import get_app_state
from .services import TrainingConfig


@require_http_methods(["POST"])
def set_config(request):
    """Store the training configuration from the config form."""
    try:
        config = TrainingConfig.from_values(
            request.POST.get('epochs'),
            request.POST.get('learning_rate'),
            request.POST.get('hidden_units'),
        )
    except ValidationError as e:
        messages.error(request, f'Invalid configuration: {e}')
        return redirect('workbench:index')
    
    get_app_state().set_config(config)
    messages.success(request, 'Training configuration saved')
    return redirect('workbench:index')


@require_http_methods(["POST"])
def train(request):
    """Start a training run in the background."""
    try:
        run = get_app_state().start_training()
        messages.info(request, f'Training started on {run.sample_count} samples...')
    except TrainingError as e:
        messages.error(request, str(e))
    
    return redirect('workbench:index')


@csrf_exempt
def api_train(request):
    """
    API endpoint to start training.
    
    An optional JSON body {"epochs", "learning_rate", "hidden_units"}
    replaces the stored config first.
    """
    if request.method != 'POST':
        return JsonResponse({'error': 'POST required'}, status=405)
    
    state = get_app_state()
    try:
        body = json.loads(request.body) if request.body else {}
        if body:
            state.set_config(TrainingConfig.from_values(
                body.get('epochs', state.config.epochs),
                body.get('learning_rate', state.config.learning_rate),
                body.get('hidden_units', state.config.hidden_units),
            ))
        run = state.start_training()
    except (ValueError, AttributeError):
        return JsonResponse({'status': 'error', 'error': 'Invalid JSON body'}, status=400)
    except ValidationError as e:
        return JsonResponse({'status': 'error', 'error': str(e)}, status=400)
    except TrainingError as e:
        status = 409 if isinstance(e, AlreadyTrainingError) else 400
        return JsonResponse({
            'status': 'error',
            'error': str(e),
            'error_type': type(e).__name__,
        }, status=status)
    
    return JsonResponse({'status': 'started', 'run': run.to_dict()}, status=202)


def api_status(request):
    """API endpoint with the training state and latest run."""
    return JsonResponse(get_app_state().status())
