from django.http import JsonResponse

from tgspain.apps.core.auth_roles import is_admin
from tgspain.apps.core.helpers import redirect_and_flash_info
from tgspain.apps.core.models import Profile

LOGIN_WHITELIST = ("/accounts/login/", "/accounts/logout/", "/403/", "/404/",
                   "/500/", "/favicon.ico", "/consentimiento/")

PUBLIC_PREFIXES = ("/static/", "/admin/", "/api/consent/", "/qr/")

# Reachable by signed-in users whose profile has not been verified yet
UNVERIFIED_WHITELIST = ("/pending-verification/", "/onboarding/")

# Views that answer anonymous callers themselves (JSON 401)
SELF_AUTHENTICATING = ("/api/validate-ticket/",)


def _is_public(path):
    return path in LOGIN_WHITELIST or path.startswith(PUBLIC_PREFIXES)


class Login:
    """This middleware requires a login for every view"""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        path = request.path
        whitelisted = _is_public(path) or path in SELF_AUTHENTICATING

        if not whitelisted and request.user.is_anonymous:
            if path.startswith("/api/"):
                return JsonResponse({"error": "unauthorized"}, status=401)
            return redirect_and_flash_info(
                request,
                "Inicia sesión para ver esta página",
                path=f"/accounts/login/?next={request.path}")
        return self.get_response(request)


class VerificationGate:
    """
    Keep signed-in users with an unverified profile on the pending
    verification page until an admin or a CSV import verifies them
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        path = request.path
        user = request.user
        if (user.is_anonymous or _is_public(path)
                or path in UNVERIFIED_WHITELIST or is_admin(user)):
            return self.get_response(request)

        profile = Profile.objects.filter(user=user).first()
        if profile is not None and profile.is_verified:
            return self.get_response(request)

        if path.startswith("/api/"):
            return JsonResponse({"error": "not_verified"}, status=403)
        return redirect_and_flash_info(request,
                                       "Tu cuenta está pendiente de verificación",
                                       path="/pending-verification/")
