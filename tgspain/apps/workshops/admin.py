from django.contrib import admin

from tgspain.apps.workshops import models


@admin.register(models.Workshop)
class WorkshopAdmin(admin.ModelAdmin):
    list_display = ("name", "event", "category", "max_capacity", "location")
    list_filter = ("event", "category")


@admin.register(models.WorkshopTimeSlot)
class WorkshopTimeSlotAdmin(admin.ModelAdmin):
    list_display = ("event", "slot_number", "start_time", "end_time")
    list_filter = ("event", )


@admin.register(models.WorkshopPreference)
class WorkshopPreferenceAdmin(admin.ModelAdmin):
    list_display = ("team", "event", "preference_order", "workshop", "submitted_by")
    list_filter = ("event", )
    search_fields = ("team__name", )


@admin.register(models.WorkshopAssignment)
class WorkshopAssignmentAdmin(admin.ModelAdmin):
    list_display = ("team", "event", "assignment_slot", "workshop", "time_slot",
                    "preference_matched", "assignment_type")
    list_filter = ("event", "assignment_type", "assignment_slot")
    search_fields = ("team__name", )
