import os

from django.conf import settings
from django.contrib.auth import logout
from django.contrib.auth.decorators import login_required
from django.shortcuts import get_object_or_404, redirect, render, reverse
from django.views.decorators.http import require_http_methods
import yaml

from tgspain.apps.core.auth_roles import (
    admin_required, back_office_required, dashboard_path, is_admin, primary_role
)
from tgspain.apps.core.forms import CSVImportForm, OnboardingForm, SettingsForm
from tgspain.apps.core.helpers import redirect_and_flash_success
from tgspain.apps.core.models import CSVImport, PlatformSettings, Profile, Team, TeamMember
from tgspain.apps.events.models import Event, EventRegistration
from tgspain.libs.data_import.process import process_import
from tgspain.libs.event_registration import published_events
from tgspain.libs.tickets import event_today


def index(request):
    profile = Profile.objects.filter(user=request.user).first()
    if (profile is not None and not profile.onboarding_completed
            and not is_admin(request.user)):
        return redirect("onboarding")
    return redirect(dashboard_path(primary_role(request.user)))


def tgspain_logout(request, *args):
    logout(request)
    return redirect_and_flash_success(request,
                                      "Has cerrado sesión",
                                      path=reverse("login"))


def render_403(request, *args, **kwargs):
    response = render(request, "common/403.html")
    response.status_code = 403
    return response


def render_404(request, *args, **kwargs):
    response = render(request, "common/404.html")
    response.status_code = 404
    return response


def render_500(request, *args, **kwargs):
    response = render(request, "common/500.html")
    response.status_code = 500
    return response


@login_required
def pending_verification(request):
    profile = Profile.objects.filter(user=request.user).first()
    if profile is not None and profile.is_verified:
        return redirect("index")
    return render(request, "core/pending_verification.html", {"profile": profile})


@login_required
@require_http_methods(["GET", "POST"])
def onboarding(request):
    profile, _ = Profile.objects.get_or_create(
        user=request.user, defaults={"email": request.user.email})
    if request.method == "POST":
        form = OnboardingForm(request.POST, instance=profile)
        if form.is_valid():
            form.save()
            return redirect_and_flash_success(request,
                                              "¡Perfil completado!",
                                              path=reverse("index"))
    else:
        form = OnboardingForm(instance=profile)
    return render(request, "core/onboarding.html", {
        "form": form,
        "missing_fields": profile.missing_fields(),
    })


@login_required
def participant_dashboard(request):
    registrations = (EventRegistration.objects
                     .filter(user=request.user)
                     .exclude(registration_status=EventRegistration.CANCELLED)
                     .select_related("event", "ticket_type")
                     .order_by("event__date"))
    memberships = (TeamMember.objects
                   .filter(user=request.user)
                   .select_related("team", "team__hub"))
    registered_ids = {registration.event_id for registration in registrations}
    upcoming = [event for event in published_events().filter(date__gte=event_today())
                if event.pk not in registered_ids]
    return render(request, "core/participant_dashboard.html", {
        "profile": Profile.objects.filter(user=request.user).first(),
        "registrations": registrations,
        "memberships": memberships,
        "upcoming_events": upcoming,
    })


@back_office_required
def admin_home(request):
    counts = {
        "pending_profiles": Profile.objects.filter(
            verification_status=Profile.PENDING).count(),
        "verified_profiles": Profile.objects.filter(
            verification_status=Profile.VERIFIED).count(),
        "teams": Team.objects.count(),
        "published_events": Event.objects.filter(status=Event.PUBLISHED).count(),
    }
    return render(request, "core/admin_home.html", {
        "counts": counts,
        "events": Event.objects.order_by("-date")[:10],
        "imports": CSVImport.objects.all()[:5],
        "can_import": is_admin(request.user),
    })


def get_settings_from_yaml():
    settings_dir = settings.PLATFORM_SETTINGS_DIR

    all_settings = []
    setting_dict = {}
    categories = []

    for filename in sorted(os.listdir(settings_dir)):
        if not filename.endswith((".yaml", ".yml")):
            continue
        with open(os.path.join(settings_dir, filename), "r", encoding="utf-8") as stream:
            data = yaml.safe_load(stream)

        category_info = data["category"]
        category_id = category_info.get("id")
        categories.append(category_info)
        setting_dict[category_id] = []

        for setting in data["settings"]:
            all_settings.append(setting)
            setting_dict[category_id].append(setting["name"])

    if all_settings:
        stored_settings = {
            ps.key: ps.value if ps.value_string is None else ps.value_string
            for ps in PlatformSettings.objects.filter(
                key__in=[setting["name"] for setting in all_settings])
        }
        for setting in all_settings:
            stored_value = stored_settings.get(setting["name"])
            if stored_value is None:
                continue
            if setting.get("type") == "boolean":
                setting["value"] = stored_value == 1
            else:
                setting["value"] = stored_value

    categories.sort(key=lambda x: x.get("order", 999))
    return all_settings, setting_dict, categories


@back_office_required
@require_http_methods(["GET", "POST"])
def settings_form(request):
    yaml_settings, setting_dict, categories = get_settings_from_yaml()

    if request.method == "POST":
        form = SettingsForm(request.POST, settings=yaml_settings)
        if form.is_valid():
            form.save()
            return redirect_and_flash_success(request,
                                              "Ajustes guardados",
                                              path=reverse("settings_form"))
    else:
        form = SettingsForm(settings=yaml_settings)

    categories_with_fields = [
        {
            **category,
            "fields": [form[f"setting_{name}"] for name in setting_dict[category["id"]]]
        }
        for category in categories
    ]
    return render(request, "core/settings_form.html", {
        "form": form,
        "categories": categories_with_fields,
    })


@admin_required
@require_http_methods(["GET", "POST"])
def csv_import_upload(request):
    if request.method == "POST":
        form = CSVImportForm(request.POST, request.FILES)
        if form.is_valid():
            csv_import = CSVImport.objects.create(
                uploaded_by=request.user,
                file_name=form.file_name(),
                users_csv=form.cleaned_data["users_file"],
                teams_csv=form.cleaned_data["teams_file"],
                admin_email=form.cleaned_data["admin_email"],
            )
            process_import(csv_import)
            return redirect("csv_import_detail", import_id=csv_import.pk)
    else:
        form = CSVImportForm(initial={"admin_email": request.user.email})
    return render(request, "core/csv_import_upload.html", {
        "form": form,
        "imports": CSVImport.objects.all()[:20],
    })


@admin_required
def csv_import_detail(request, import_id):
    csv_import = get_object_or_404(CSVImport, pk=import_id)
    return render(request, "core/csv_import_detail.html", {"csv_import": csv_import})
