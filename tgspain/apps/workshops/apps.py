from django.apps import AppConfig


class WorkshopsConfig(AppConfig):
    default_auto_field = "django.db.models.AutoField"
    name = "tgspain.apps.workshops"
    label = "workshops"
    verbose_name = "Talleres"
