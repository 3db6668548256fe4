import random
import string
import time
from zoneinfo import ZoneInfo

from django.conf import settings
from django.utils import timezone
from qr_code.qrcode.maker import make_qr_code_image
from qr_code.qrcode.utils import QRCodeOptions

CODE_PREFIX = "TGM"
CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_LENGTH = 8


def _base36(number):
    digits = string.digits + string.ascii_uppercase
    if number == 0:
        return "0"
    encoded = ""
    while number:
        number, remainder = divmod(number, 36)
        encoded = digits[remainder] + encoded
    return encoded


def _code_is_taken(code):
    from tgspain.apps.events.models import Companion, EventRegistration

    return (EventRegistration.objects.filter(qr_code=code).exists()
            or Companion.objects.filter(qr_code=code).exists())


def generate_qr_code(year=None):
    """Ticket code shared by registrations and companions, e.g. TGM-2025-7KQ2M9XA"""
    year = year or timezone.now().year
    code = None
    while code is None or _code_is_taken(code):
        suffix = "".join(random.choices(CODE_ALPHABET, k=CODE_LENGTH))
        code = f"{CODE_PREFIX}-{year}-{suffix}"
    return code


def generate_registration_number(year=None):
    from tgspain.apps.events.models import EventRegistration

    year = year or timezone.now().year
    number = None
    while number is None or EventRegistration.objects.filter(
            registration_number=number).exists():
        stamp = _base36(int(time.time() * 1000))
        noise = "".join(random.choices(CODE_ALPHABET, k=4))
        number = f"{CODE_PREFIX}-{year}-{(stamp + noise)[-CODE_LENGTH:]}"
    return number


def qr_code_png(data, size="M"):
    options = QRCodeOptions(
        size=size,
        border=4,
        image_format="png",
        dark_color="black",
        light_color="white",
    )
    return make_qr_code_image(data, options)


def event_timezone():
    return ZoneInfo(settings.EVENT_TIME_ZONE)


def event_today():
    """Today's date where the events take place"""
    return timezone.localdate(timezone=event_timezone())
