from django.apps import AppConfig


class EventsConfig(AppConfig):
    default_auto_field = "django.db.models.AutoField"
    name = "tgspain.apps.events"
    label = "events"
    verbose_name = "Eventos"
