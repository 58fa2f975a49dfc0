from django.contrib import admin
from .models import ModelArtifact


@admin.register(ModelArtifact)
class ModelArtifactAdmin(admin.ModelAdmin):
    list_display = ['version', 'file_hash', 'created_at']
    search_fields = ['version']
    readonly_fields = ['file_hash', 'created_at']
