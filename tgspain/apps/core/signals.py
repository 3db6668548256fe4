from django.conf import settings
from django.db.models.signals import post_save
from django.dispatch import receiver

from tgspain.apps.core.models import Profile


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def create_profile_for_new_user(instance, created, raw=False, **kwargs):
    if not created or raw:
        return
    Profile.objects.get_or_create(
        user=instance,
        defaults={
            "email": instance.email,
            "first_name": instance.first_name,
            "last_name": instance.last_name,
        },
    )
