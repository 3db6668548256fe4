"""
Builders for the emails the platform sends. Each returns EmailRequest
objects; sending is left to the caller.
"""
import logging
from html import escape

from django.conf import settings
from django.urls import reverse

from tgspain.libs.email_service import EmailRequest

logger = logging.getLogger(__name__)

MAX_ERRORS_IN_SUMMARY = 20


def absolute_url(path):
    return f"{settings.PUBLIC_SITE_URL.rstrip('/')}{path}"


def _event_line(event):
    parts = [f"{event.date:%d/%m/%Y}"]
    if event.start_time:
        parts.append(f"{event.start_time:%H:%M}")
    if event.location_name:
        parts.append(event.location_name)
    return " · ".join(parts)


def registration_confirmation(registration):
    event = registration.event
    ticket_url = absolute_url(reverse("ticket_detail", args=[registration.pk]))
    qr_url = absolute_url(reverse("ticket_qr", args=[registration.qr_code]))
    companions = list(registration.companions.all())

    lines = [
        f"Hola {registration.first_name or ''},".strip(),
        "",
        f"Tu inscripción en {event.name} está confirmada.",
        _event_line(event),
        "",
        f"Número de inscripción: {registration.registration_number}",
        f"Código de entrada: {registration.qr_code}",
        f"Consulta tu entrada: {ticket_url}",
    ]
    if companions:
        lines.append("")
        lines.append("Acompañantes:")
        for companion in companions:
            lines.append(f"- {companion.display_name}: {companion.qr_code}")

    companion_html = "".join(
        f"<li>{escape(companion.display_name)}: <code>{escape(companion.qr_code)}</code></li>"
        for companion in companions
    )
    html_body = (
        f"<p>Tu inscripción en <strong>{escape(event.name)}</strong> está confirmada.</p>"
        f"<p>{escape(_event_line(event))}</p>"
        f"<p>Número de inscripción: <strong>{escape(registration.registration_number)}</strong></p>"
        f'<p><img src="{qr_url}" alt="{escape(registration.qr_code)}" width="200" height="200"></p>'
        f'<p><a href="{ticket_url}">Ver mi entrada</a></p>'
    )
    if companion_html:
        html_body += f"<p>Acompañantes:</p><ul>{companion_html}</ul>"

    return EmailRequest(
        to_address=registration.email,
        subject=f"Tu entrada para {event.name}",
        text_body="\n".join(lines),
        html_body=html_body,
        tags={"type": "registration_confirmation"},
    )


def consent_recipient(registration):
    """
    Consent goes to the parent or guardian when known. Falling back to the
    registrant's own address is logged since minors may end up signing.
    """
    profile = getattr(registration.user, "profile", None) if registration.user else None
    if profile is not None and profile.parent_email:
        return profile.parent_email
    logger.warning(
        "No parent email for registration %s; sending consent request to %s",
        registration.registration_number, registration.email)
    return registration.email


def event_consent(registration):
    event = registration.event
    consent_url = absolute_url(
        f"{reverse('consent_page')}?token={registration.consent_token}")
    name = registration.display_name or "la participante"
    text_body = "\n".join([
        f"Necesitamos el consentimiento para la asistencia de {name} a {event.name}.",
        _event_line(event),
        "",
        f"Firma el consentimiento aquí: {consent_url}",
    ])
    html_body = (
        f"<p>Necesitamos el consentimiento para la asistencia de "
        f"<strong>{escape(name)}</strong> a <strong>{escape(event.name)}</strong>.</p>"
        f"<p>{escape(_event_line(event))}</p>"
        f'<p><a href="{consent_url}">Firmar consentimiento</a></p>'
    )
    return EmailRequest(
        to_address=consent_recipient(registration),
        subject=f"Consentimiento para {event.name}",
        text_body=text_body,
        html_body=html_body,
        tags={"type": "event_consent"},
    )


def welcome(profile):
    login_url = absolute_url(reverse("login"))
    greeting = f"Hola {profile.first_name}," if profile.first_name else "Hola,"
    return EmailRequest(
        to_address=profile.email or profile.user.email,
        subject="Bienvenida a Technovation Girls España",
        text_body=(f"{greeting}\n\nTu cuenta ha sido verificada. "
                   f"Ya puedes acceder a la plataforma: {login_url}"),
        html_body=(f"<p>{escape(greeting)}</p><p>Tu cuenta ha sido verificada.</p>"
                   f'<p><a href="{login_url}">Acceder a la plataforma</a></p>'),
        tags={"type": "welcome"},
    )


def import_summary(csv_import):
    errors = csv_import.errors or []
    status = "completada" if csv_import.status == csv_import.COMPLETED else "fallida"
    subject = (f"Importación {status}: {csv_import.records_new} nuevos, "
               f"{csv_import.records_updated} actualizados, "
               f"{csv_import.records_activated} activados, {len(errors)} errores")

    counts = [
        ("Registros procesados", csv_import.records_processed),
        ("Nuevos", csv_import.records_new),
        ("Actualizados", csv_import.records_updated),
        ("Activados", csv_import.records_activated),
        ("Errores", len(errors)),
    ]
    shown_errors = [_format_error(error) for error in errors[:MAX_ERRORS_IN_SUMMARY]]

    text_lines = [f"Archivo: {csv_import.file_name}", ""]
    text_lines += [f"{label}: {value}" for label, value in counts]
    if shown_errors:
        text_lines += ["", "Errores:"] + [f"- {error}" for error in shown_errors]
    if len(errors) > MAX_ERRORS_IN_SUMMARY:
        text_lines.append(f"... y {len(errors) - MAX_ERRORS_IN_SUMMARY} más")

    rows = "".join(f"<tr><td>{label}</td><td>{value}</td></tr>"
                   for label, value in counts)
    error_items = "".join(f"<li>{escape(error)}</li>" for error in shown_errors)
    html_body = (f"<p>Archivo: {escape(csv_import.file_name)}</p>"
                 f"<table>{rows}</table>")
    if error_items:
        html_body += f"<p>Errores:</p><ul>{error_items}</ul>"

    return EmailRequest(
        to_address=csv_import.admin_email,
        subject=subject,
        text_body="\n".join(text_lines),
        html_body=html_body,
        tags={"type": "import_summary"},
    )


def _format_error(error):
    if isinstance(error, dict):
        prefix = f"Fila {error['row']}: " if error.get("row") else ""
        email = f"{error['email']}: " if error.get("email") else ""
        return f"{prefix}{email}{error.get('error', '')}"
    return str(error)


def event_announcement(event, registration, subject, body):
    return EmailRequest(
        to_address=registration.email,
        subject=subject,
        text_body=body,
        html_body="".join(f"<p>{escape(paragraph)}</p>"
                          for paragraph in body.split("\n\n")),
        transactional=False,
        tags={"type": "event_email", "event": str(event.pk)},
    )
