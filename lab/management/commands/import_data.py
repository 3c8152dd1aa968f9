import json

from django.core.management.base import BaseCommand, CommandError

from lab.exceptions import UnsupportedBackupError
from lab.repository import get_repository


class Command(BaseCommand):
    help = "Replace all laboratory data with the contents of a JSON backup."

    def add_arguments(self, parser):
        parser.add_argument('path')

    def handle(self, *args, **options):
        try:
            with open(options['path'], encoding='utf-8') as fh:
                payload = json.load(fh)
        except (OSError, ValueError) as e:
            raise CommandError(f"Cannot read backup: {e}")
        try:
            counts = get_repository().import_all_data(payload)
        except UnsupportedBackupError as e:
            raise CommandError(str(e.detail))
        summary = ', '.join(f"{k}={v}" for k, v in counts.items())
        self.stdout.write(self.style.SUCCESS(f"Backup restored ({summary})"))
