from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from lab.models import User


class Command(BaseCommand):
    help = "Ensure the configured admin account exists as a superuser (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument('--username', default=settings.LAB_ADMIN_USERNAME)
        parser.add_argument('--password', default=settings.LAB_ADMIN_PASSWORD)

    def handle(self, *args, **opts):
        username, password = opts['username'], opts['password']
        if not username or not password:
            raise CommandError("Set LAB_ADMIN_USERNAME and LAB_ADMIN_PASSWORD (or pass --username/--password).")
        user, created = User.objects.get_or_create(
            username=username,
            defaults={'display_name': 'Administrator', 'is_active': True},
        )
        # keep the configured credentials authoritative
        user.set_password(password)
        user.is_active = True
        user.is_staff = True
        user.is_superuser = True
        user.save()
        verb = 'created' if created else 'updated'
        self.stdout.write(self.style.SUCCESS(f"ok: {username} {verb}"))
