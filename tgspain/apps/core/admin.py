from django import forms
from django.contrib import admin, messages

from tgspain.apps.core import models
from tgspain.libs import notifications
from tgspain.libs.email_service import deliver
from tgspain.libs.team_members import MemberValidationCache, validate_member_for_team


class TeamMemberFormSet(forms.BaseInlineFormSet):
    """Runs the membership rules on every member added through the admin"""

    def clean(self):
        super(TeamMemberFormSet, self).clean()
        if any(self.errors) or self.instance.pk is None:
            return
        cache = MemberValidationCache()
        cache.prefetch_team(self.instance)
        for form in self.forms:
            if not form.has_changed() or form.instance.pk or \
                    self._should_delete_form(form):
                continue
            user = form.cleaned_data.get("user")
            if user is None:
                continue
            result = validate_member_for_team(user, self.instance, cache)
            if not result.valid:
                form.add_error("user", result.reason)
                continue
            form.instance.member_type = result.member_type
            if result.member_type == models.TeamMember.PARTICIPANT:
                cache.add_participant(self.instance)


class TeamMemberInline(admin.TabularInline):
    model = models.TeamMember
    formset = TeamMemberFormSet
    fields = ("user", "member_type", "joined_at")
    readonly_fields = ("member_type", "joined_at")
    raw_id_fields = ("user", )
    extra = 1


@admin.register(models.Team)
class TeamAdmin(admin.ModelAdmin):
    list_display = ("name", "tg_team_id", "category", "hub", "city")
    list_filter = ("category", "hub")
    search_fields = ("name", "tg_team_id")
    inlines = (TeamMemberInline, )


@admin.register(models.Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ("email", "first_name", "last_name", "verification_status", "hub")
    list_filter = ("verification_status", "hub", "onboarding_completed")
    search_fields = ("email", "first_name", "last_name", "dni", "tg_id")
    actions = ("mark_verified", )

    @admin.action(description="Marcar como verificado y enviar bienvenida")
    def mark_verified(self, request, queryset):
        pending = list(queryset.exclude(verification_status=models.Profile.VERIFIED)
                       .select_related("user"))
        for profile in pending:
            profile.verification_status = models.Profile.VERIFIED
            profile.save(update_fields=["verification_status", "updated_at"])
            models.AuditLog.record(request.user, "verify_profile", profile)
        sent = deliver([notifications.welcome(profile) for profile in pending],
                       "profile verification")
        self.message_user(request,
                          f"{len(pending)} perfil(es) verificados, {sent} email(s) enviados",
                          messages.SUCCESS)


@admin.register(models.UserRole)
class UserRoleAdmin(admin.ModelAdmin):
    list_display = ("user", "role", "created_at")
    list_filter = ("role", )
    raw_id_fields = ("user", )


@admin.register(models.AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ("timestamp", "action", "entity_type", "entity_id", "user")
    list_filter = ("action", "entity_type")

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(models.CSVImport)
class CSVImportAdmin(admin.ModelAdmin):
    list_display = ("file_name", "status", "records_new", "records_updated",
                    "records_activated", "imported_at")
    list_filter = ("status", )
    exclude = ("users_csv", "teams_csv")


admin.site.register(models.Hub)
admin.site.register(models.PlatformSettings)
