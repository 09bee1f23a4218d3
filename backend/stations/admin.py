from django.contrib import admin

from .models import Station


@admin.register(Station)
class StationAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "subdivision", "district", "is_active")
    list_filter = ("district", "is_active")
    search_fields = ("name", "code", "subdivision")
    ordering = ("district", "subdivision", "name")
