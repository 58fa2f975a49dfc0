from django.shortcuts import redirect
from django.http import HttpResponse, JsonResponse
from django.views.decorators.http import require_http_methods
from django.views.decorators.csrf import csrf_exempt
from django.contrib import messages
import json

from shared.utils.exceptions import ValidationError
from workbench.state import get_app_state


@require_http_methods(["POST"])
def add(request):
    """Add one sample from the record form."""
    store = get_app_state().store
    try:
        store.add(
            request.POST.get('input1'),
            request.POST.get('input2'),
            request.POST.get('output'),
        )
    except ValidationError as e:
        messages.error(request, f'Please enter valid numbers. ({e})')
    
    return redirect('workbench:index')


@require_http_methods(["POST"])
def clear(request):
    """Remove every sample."""
    get_app_state().store.clear()
    messages.success(request, 'All data cleared')
    return redirect('workbench:index')


@require_http_methods(["POST"])
def import_csv(request):
    """Append samples from an uploaded CSV file."""
    uploaded = request.FILES.get('file')
    if not uploaded:
        messages.error(request, 'Choose a CSV file to import')
        return redirect('workbench:index')
    
    try:
        text = uploaded.read().decode('utf-8-sig')
    except UnicodeDecodeError:
        messages.error(request, 'Import failed: file is not UTF-8 text')
        return redirect('workbench:index')
    
    result = get_app_state().store.import_csv(text)
    if result.skipped:
        messages.warning(
            request,
            f'Imported {result.added} rows; skipped {result.skipped} invalid rows'
        )
    else:
        messages.success(request, f'Imported {result.added} rows')
    
    return redirect('workbench:index')


def export_csv(request):
    """Download the dataset as CSV."""
    response = HttpResponse(
        get_app_state().store.export_csv(),
        content_type='text/csv',
    )
    response['Content-Disposition'] = 'attachment; filename="dataset.csv"'
    return response


@csrf_exempt
def api_samples(request):
    """API endpoint to list samples (GET) or add one (POST)."""
    store = get_app_state().store
    
    if request.method == 'POST':
        try:
            data = json.loads(request.body)
            sample = store.add(data.get('input1'), data.get('input2'), data.get('output'))
        except (ValueError, AttributeError):
            return JsonResponse({'status': 'error', 'error': 'Invalid JSON body'}, status=400)
        except ValidationError as e:
            return JsonResponse({'status': 'error', 'error': str(e)}, status=400)
        return JsonResponse({'status': 'success', 'sample': sample.to_dict(), 'count': store.count()})
    
    if request.method != 'GET':
        return JsonResponse({'error': 'GET or POST required'}, status=405)
    
    return JsonResponse({'samples': [s.to_dict() for s in store.samples()]})


def api_stats(request):
    """API endpoint with summary statistics of the outputs."""
    return JsonResponse(get_app_state().store.stats().to_dict())
