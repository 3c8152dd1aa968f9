import json

from django.core.management.base import BaseCommand

from lab.repository import get_repository


class Command(BaseCommand):
    help = "Write a full backup (tests, patients, visits, results, expenses, settings, layouts) as JSON."

    def add_arguments(self, parser):
        parser.add_argument('path', help="Output file, or '-' for stdout")

    def handle(self, *args, **options):
        payload = get_repository().export_all_data()
        text = json.dumps(payload, ensure_ascii=False, indent=2)
        if options['path'] == '-':
            self.stdout.write(text)
            return
        with open(options['path'], 'w', encoding='utf-8') as fh:
            fh.write(text)
        counts = ', '.join(f"{k}={len(v)}" for k, v in payload.items() if isinstance(v, list))
        self.stdout.write(self.style.SUCCESS(f"Backup written to {options['path']} ({counts})"))
