from django.contrib import admin
from .models import PromEvent, PromQuote


class PromQuoteInline(admin.TabularInline):
    model = PromQuote
    extra = 0
    fields = ["vendor_name", "category", "price_total", "rating", "availability_status", "is_finalist"]


@admin.register(PromEvent)
class PromEventAdmin(admin.ModelAdmin):
    list_display = ["title", "event_date", "status", "total_budget", "created_at"]
    list_filter = ["status"]
    search_fields = ["title", "venue_name"]
    readonly_fields = ["id", "created_at", "updated_at"]
    inlines = [PromQuoteInline]


@admin.register(PromQuote)
class PromQuoteAdmin(admin.ModelAdmin):
    list_display = ["vendor_name", "prom", "category", "price_total", "rating", "is_finalist"]
    list_filter = ["category", "availability_status", "is_finalist"]
    search_fields = ["vendor_name", "vendor_contact_name"]
    readonly_fields = ["id", "created_at", "updated_at"]
