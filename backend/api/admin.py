from django.contrib import admin
from .models import SongJob


@admin.register(SongJob)
class SongJobAdmin(admin.ModelAdmin):
    list_display = ('id', 'status', 'attempts', 'duration_sec', 'created_at')
    list_filter = ('status', 'created_at')
    search_fields = ('id', 'input_hash', 'provider_request_id')
    readonly_fields = ('id', 'input_hash', 'created_at', 'updated_at')
