from django.contrib import admin
from django.contrib.auth.views import LoginView
from django.urls import path, re_path

import tgspain.apps.core.views as views
import tgspain.apps.events.views as event_views
import tgspain.apps.workshops.views as workshop_views


admin.autodiscover()

urlpatterns = [
    re_path(r"^admin/logout/$", views.tgspain_logout, name="admin_logout"),
    re_path(r"^accounts/logout/$", views.tgspain_logout, name="logout"),
    path("admin/", admin.site.urls),
    re_path(r"^$", views.index, name="index"),
    re_path(r"^403/", views.render_403, name="403"),
    re_path(r"^404/", views.render_404, name="404"),
    re_path(r"^500/", views.render_500, name="500"),

    # Account related
    re_path(r"^accounts/login/$",
            LoginView.as_view(template_name="registration/login.html",
                              redirect_authenticated_user=True),
            name="login"),
    path("pending-verification/", views.pending_verification,
         name="pending_verification"),
    path("onboarding/", views.onboarding, name="onboarding"),
    path("dashboard/", views.participant_dashboard, name="participant_dashboard"),

    # Back office
    path("backoffice/", views.admin_home, name="admin_home"),
    path("backoffice/settings/", views.settings_form, name="settings_form"),
    path("backoffice/imports/", views.csv_import_upload, name="csv_import_upload"),
    path("backoffice/imports/<int:import_id>/", views.csv_import_detail,
         name="csv_import_detail"),
    path("backoffice/events/<int:event_id>/registrations/",
         event_views.admin_event_registrations, name="admin_event_registrations"),
    path("backoffice/events/<int:event_id>/email/", event_views.send_event_email,
         name="send_event_email"),
    path("backoffice/registrations/<int:registration_id>/cancel/",
         event_views.admin_cancel, name="admin_cancel_registration"),
    path("backoffice/events/<int:event_id>/preferences/",
         workshop_views.preferences_overview, name="preferences_overview"),
    path("backoffice/events/<int:event_id>/preferences/<int:team_id>/",
         workshop_views.edit_preferences, name="edit_preferences"),
    path("backoffice/events/<int:event_id>/team-stats/", workshop_views.team_stats,
         name="team_stats"),
    path("backoffice/events/<int:event_id>/assignments/", workshop_views.assignments,
         name="workshop_assignments"),
    path("backoffice/events/<int:event_id>/assignments/manual/",
         workshop_views.manual_assignment, name="manual_assignment"),
    path("backoffice/events/<int:event_id>/time-slots/", workshop_views.time_slots,
         name="workshop_time_slots"),

    # Events and tickets
    path("events/", event_views.event_list, name="event_list"),
    path("events/<int:event_id>/", event_views.event_detail, name="event_detail"),
    path("events/<int:event_id>/register/", event_views.register, name="register"),
    path("tickets/", event_views.my_tickets, name="my_tickets"),
    path("tickets/<int:registration_id>/", event_views.ticket_detail,
         name="ticket_detail"),
    path("tickets/<int:registration_id>/cancel/", event_views.cancel,
         name="cancel_registration"),
    re_path(r"^qr/(?P<qr_code>[A-Z0-9-]+)\.png$", event_views.ticket_qr, name="ticket_qr"),

    # Check-in
    path("validate/", event_views.validate_tickets, name="validate_tickets"),
    re_path(r"^validate/(?P<qr_code>[A-Za-z0-9-]+)/$", event_views.validate_tickets,
            name="validate_ticket_code"),
    path("api/validate-ticket/", event_views.api_validate_ticket,
         name="api_validate_ticket"),

    # Consent
    path("consentimiento/", event_views.consent_page, name="consent_page"),
    path("api/consent/info/", event_views.api_consent_info, name="api_consent_info"),
    path("api/consent/submit/", event_views.api_consent_submit,
         name="api_consent_submit"),

    # Workshops
    path("mentor/", workshop_views.mentor_dashboard, name="mentor_dashboard"),
    path("mentor/events/<int:event_id>/teams/<int:team_id>/preferences/",
         workshop_views.submit_preferences, name="submit_preferences"),
]

handler403 = "tgspain.apps.core.views.render_403"
handler404 = "tgspain.apps.core.views.render_404"
handler500 = "tgspain.apps.core.views.render_500"
