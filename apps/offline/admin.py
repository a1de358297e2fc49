from django.contrib import admin
from .models import CacheEntry, OfflineEvent, OfflineProtocol, OfflineTask, PendingSyncItem


@admin.register(PendingSyncItem)
class PendingSyncItemAdmin(admin.ModelAdmin):
    list_display = ["id", "method", "url", "timestamp", "retry_count"]
    list_filter = ["method"]
    search_fields = ["url"]
    readonly_fields = ["id", "timestamp"]


@admin.register(CacheEntry)
class CacheEntryAdmin(admin.ModelAdmin):
    list_display = ["key", "timestamp", "expires_at"]
    search_fields = ["key"]


@admin.register(OfflineEvent, OfflineTask, OfflineProtocol)
class MirroredEntityAdmin(admin.ModelAdmin):
    list_display = ["id", "stored_at"]
    search_fields = ["id"]
