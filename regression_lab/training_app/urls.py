from django.urls import path
from . import views

app_name = 'training_app'

urlpatterns = [
    path('config/', views.set_config, name='set_config'),
    path('train/', views.train, name='train'),
    path('api/train/', views.api_train, name='api_train'),
    path('api/status/', views.api_status, name='api_status'),
]
