from django.urls import path
from . import views

app_name = 'model_registry'

urlpatterns = [
    path('', views.index, name='index'),
    path('save/', views.save_model, name='save'),
    path('load/<str:version>/', views.load_model, name='load'),
    path('download/<str:version>/', views.download, name='download'),
    path('delete/<str:version>/', views.delete_model, name='delete'),
    path('upload/', views.upload, name='upload'),
    path('api/list/', views.api_list, name='api_list'),
]
