from django.urls import path
from . import views

app_name = 'workbench'

urlpatterns = [
    path('', views.index, name='index'),
    path('api/chart/', views.api_chart, name='api_chart'),
]
