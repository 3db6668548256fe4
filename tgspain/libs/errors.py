import os
import sys
import traceback

import sentry_sdk


def emit_current_exception():
    if os.environ.get("DEBUG") in ["1", 1, True, "true"]:
        traceback.print_exc(file=sys.stdout)
    else:
        sentry_sdk.capture_exception()


class RegistrationError(Exception):
    """A registration could not be created or changed"""

    def __init__(self, reason=None):
        super(RegistrationError, self).__init__(reason)
        self.msg = reason or "No se pudo completar la inscripción"

    def __str__(self):
        return self.msg


class AlreadyRegisteredError(RegistrationError):
    def __init__(self):
        super(AlreadyRegisteredError, self).__init__(
            "Ya estás inscrito en este evento. Consulta tus entradas.")


class CapacityError(RegistrationError):
    def __init__(self, available, companions=0):
        if companions:
            reason = (f"No hay suficientes plazas disponibles. Plazas libres: "
                      f"{available}, necesitas {1 + companions} "
                      f"(incluyendo {companions} acompañante(s))")
        else:
            reason = "No hay plazas disponibles para este tipo de entrada"
        super(CapacityError, self).__init__(reason)
        self.available = available
        self.companions = companions


class PreferencesError(Exception):
    def __init__(self, reason):
        super(PreferencesError, self).__init__(reason)
        self.msg = reason

    def __str__(self):
        return self.msg


class PreferencesAlreadySubmittedError(PreferencesError):
    def __init__(self):
        super(PreferencesAlreadySubmittedError, self).__init__(
            "Las preferencias ya fueron enviadas para este equipo")


class AssignmentError(Exception):
    def __init__(self, reason=None):
        super(AssignmentError, self).__init__(reason)
        self.msg = reason or "No se pudieron asignar los talleres"

    def __str__(self):
        return self.msg


class ConsentValidationError(Exception):
    def __init__(self, reason):
        super(ConsentValidationError, self).__init__(reason)
        self.msg = reason

    def __str__(self):
        return self.msg


class ImportProcessingError(Exception):
    pass
