from django.apps import AppConfig


class CoreConfig(AppConfig):
    default_auto_field = "django.db.models.AutoField"
    name = "tgspain.apps.core"
    label = "core"
    verbose_name = "Technovation Girls Spain"

    def ready(self):
        import tgspain.apps.core.signals  # noqa: F401
