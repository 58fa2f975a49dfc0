from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),
    path('', include('workbench.urls')),
    path('', include('dataset_app.urls')),
    path('training/', include('training_app.urls')),
    path('inference/', include('inference_app.urls')),
    path('models/', include('model_registry.urls')),
]
