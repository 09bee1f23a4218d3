from django.contrib import admin

from .models import FIR, ChargeSection, FIRRemark
from .services import DeadlineCalculatorService


class ChargeSectionInline(admin.TabularInline):
    model = ChargeSection
    extra = 0


class FIRRemarkInline(admin.TabularInline):
    model = FIRRemark
    extra = 0
    readonly_fields = ("remark", "added_by", "created_at")

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(FIR)
class FIRAdmin(admin.ModelAdmin):
    list_display = ("fir_number", "police_station", "filing_date",
                    "seriousness_days", "disposal_due_date",
                    "disposal_status", "disposal_date", "is_active")
    list_filter = ("disposal_status", "seriousness_days", "is_active",
                   "police_station__district")
    search_fields = ("fir_number", "description")
    readonly_fields = ("disposal_due_date", "created_by", "created_at", "updated_at")
    inlines = [ChargeSectionInline, FIRRemarkInline]

    def save_model(self, request, obj, form, change):
        if not change:
            obj.created_by = request.user
            obj.disposal_due_date = DeadlineCalculatorService.compute_due_date(
                obj.filing_date, obj.seriousness_days,
            )
        super().save_model(request, obj, form, change)
