from django.urls import path
from . import views

app_name = 'inference_app'

urlpatterns = [
    path('predict/', views.predict, name='predict'),
    path('api/predict/', views.api_predict, name='api_predict'),
]
