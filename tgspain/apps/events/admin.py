from django.contrib import admin, messages

from tgspain.apps.events import models
from tgspain.libs.errors import RegistrationError
from tgspain.libs.event_registration import admin_cancel_registration


class TicketTypeInline(admin.TabularInline):
    model = models.TicketType
    fields = ("name", "max_capacity", "current_count", "max_companions",
              "allowed_roles", "requires_team", "requires_verification",
              "is_active", "sort_order")
    readonly_fields = ("current_count", )
    extra = 0


@admin.register(models.Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ("name", "date", "event_type", "status", "current_registrations",
                    "max_capacity", "workshop_preferences_open")
    list_filter = ("status", "event_type")
    search_fields = ("name", "location_city")
    readonly_fields = ("current_registrations", )
    inlines = (TicketTypeInline, )


class CompanionInline(admin.TabularInline):
    model = models.Companion
    readonly_fields = ("qr_code", "checked_in_at")
    extra = 0


@admin.register(models.EventRegistration)
class EventRegistrationAdmin(admin.ModelAdmin):
    list_display = ("registration_number", "first_name", "last_name", "event",
                    "ticket_type", "registration_status", "checked_in_at")
    list_filter = ("event", "registration_status", "is_companion")
    search_fields = ("registration_number", "qr_code", "email", "first_name",
                     "last_name", "team_name")
    readonly_fields = ("qr_code", "registration_number", "consent_token",
                       "checked_in_at", "checked_in_by", "created_at")
    raw_id_fields = ("user", "team")
    inlines = (CompanionInline, )
    actions = ("cancel_registrations", )

    @admin.action(description="Cancelar inscripciones (elimina acompañantes)")
    def cancel_registrations(self, request, queryset):
        cancelled = 0
        for registration in queryset:
            try:
                admin_cancel_registration(registration, request.user)
                cancelled += 1
            except RegistrationError as e:
                self.message_user(request,
                                  f"{registration.registration_number}: {e}",
                                  messages.WARNING)
        self.message_user(request, f"{cancelled} inscripción(es) canceladas",
                          messages.SUCCESS)


@admin.register(models.EventTicketConsent)
class EventTicketConsentAdmin(admin.ModelAdmin):
    list_display = ("event_registration", "signer_full_name",
                    "signer_relationship", "signed_at")
    readonly_fields = ("signed_at", "ip_address")


@admin.register(models.EventEmail)
class EventEmailAdmin(admin.ModelAdmin):
    list_display = ("event", "subject", "recipients_count", "sent_by", "sent_at")


admin.site.register(models.EventVolunteer)
