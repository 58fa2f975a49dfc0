from django.shortcuts import redirect
from django.http import JsonResponse
from django.views.decorators.http import require_http_methods
from django.views.decorators.csrf import csrf_exempt
from django.contrib import messages
import json

from shared.utils.exceptions import (
    InferenceError,
    ModelNotReadyError,
    InvalidInputError,
)
from workbench.state import get_app_state
from .services import format_prediction


@require_http_methods(["POST"])
def predict(request):
    """Run a prediction from the predict form."""
    try:
        value = get_app_state().predict(
            request.POST.get('input1'),
            request.POST.get('input2'),
        )
        messages.success(request, format_prediction(value))
    except ModelNotReadyError as e:
        messages.error(request, str(e))
    except InvalidInputError:
        messages.error(request, 'Please enter valid numbers.')
    except InferenceError:
        messages.error(request, 'Error in prediction.')
    
    return redirect('workbench:index')


@csrf_exempt
def api_predict(request):
    """API endpoint for predictions."""
    if request.method != 'POST':
        return JsonResponse({'error': 'POST required'}, status=405)
    
    try:
        data = json.loads(request.body)
        value = get_app_state().predict(data.get('input1'), data.get('input2'))
    except (ValueError, AttributeError):
        return JsonResponse({'status': 'error', 'error': 'Invalid JSON body'}, status=400)
    except ModelNotReadyError as e:
        return JsonResponse({'status': 'error', 'error': str(e)}, status=409)
    except InferenceError as e:
        return JsonResponse({'status': 'error', 'error': str(e)}, status=400)
    
    return JsonResponse({'prediction': value, 'display': format_prediction(value)})
