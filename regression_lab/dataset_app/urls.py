from django.urls import path
from . import views

app_name = 'dataset_app'

urlpatterns = [
    path('add/', views.add, name='add'),
    path('clear/', views.clear, name='clear'),
    path('import/', views.import_csv, name='import_csv'),
    path('export/', views.export_csv, name='export_csv'),
    path('api/samples/', views.api_samples, name='api_samples'),
    path('api/stats/', views.api_stats, name='api_stats'),
]
