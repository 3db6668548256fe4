"""
Validation helpers for Spanish identity documents, ages and signed names.
"""
import re
from datetime import date

from django.core.exceptions import ValidationError
from django.core.validators import validate_email

from tgspain.libs.errors import ConsentValidationError

DNI_REGEX = re.compile(r"^[0-9]{8}[A-Z]$")
NIE_REGEX = re.compile(r"^[XYZ][0-9]{7}[A-Z]$")
SIGNED_NAME_REGEX = re.compile(r"^[a-záéíóúñüà-ÿ\s]{3,200}$", re.IGNORECASE)

DEFAULT_MINOR_AGE = 13
MAX_NAME_LENGTH = 200
MAX_DNI_LENGTH = 15


def clean_dni(value, required=True):
    """
    Normalise a DNI/NIE. Returns the cleaned document, "" for an empty
    optional value and None when the value is not a valid DNI or NIE.
    """
    cleaned = (value or "").strip().upper().replace(" ", "").replace("-", "")
    if not cleaned:
        return None if required else ""
    if DNI_REGEX.match(cleaned) or NIE_REGEX.match(cleaned):
        return cleaned
    return None


def is_valid_dni(value, required=True):
    return clean_dni(value, required=required) is not None


def calculate_age(birth_date, reference=None):
    if not birth_date:
        return -1
    reference = reference or date.today()
    age = reference.year - birth_date.year
    if (reference.month, reference.day) < (birth_date.month, birth_date.day):
        age -= 1
    return age


def is_minor(birth_date, threshold=DEFAULT_MINOR_AGE, reference=None):
    # Without a birth date we cannot prove adulthood
    if not birth_date:
        return True
    return calculate_age(birth_date, reference) <= threshold


def validate_signature_name(value, label):
    name = (value or "").strip()
    if len(name) < 3:
        raise ConsentValidationError(f"{label} debe tener al menos 3 caracteres")
    if " " not in name:
        raise ConsentValidationError(f"{label} debe incluir nombre y apellidos")
    if not SIGNED_NAME_REGEX.match(name):
        raise ConsentValidationError(f"{label} contiene caracteres no válidos")
    return name[:MAX_NAME_LENGTH]


def normalize_email(value):
    return (value or "").strip().lower()


def is_valid_email(value):
    try:
        validate_email(value)
    except ValidationError:
        return False
    return True
