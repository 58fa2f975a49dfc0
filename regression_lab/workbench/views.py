from django.shortcuts import render
from django.http import JsonResponse

from shared.visualize import plot_chart, plot_learning_curve
from .state import get_app_state


def index(request):
    """Main page: forms, data table, statistics, chart and training status."""
    state = get_app_state()
    df = state.store.to_dataframe()
    df.index = [f"Data {i + 1}" for i in range(len(df))]
    run = state.trainer.last_run
    
    context = {
        'table_html': df.to_html(classes='data-table') if len(df) else None,
        'stats': state.store.stats(),
        'chart_png': plot_chart(state.chart),
        'loss_png': plot_learning_curve(run.losses) if run and run.losses else None,
        'status': state.status(),
        'config': state.config,
        'run': run,
    }
    return render(request, 'workbench/index.html', context)


def api_chart(request):
    """API endpoint with both chart series."""
    return JsonResponse(get_app_state().chart.to_dict())
