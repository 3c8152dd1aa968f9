from django.core.management.base import BaseCommand

from lab.repository import get_repository


class Command(BaseCommand):
    help = "Add the default test catalog and the urine test; existing names are left alone."

    def handle(self, *args, **options):
        repo = get_repository()
        created = repo.initialize_default_tests()
        _, urine_created = repo.ensure_urine_test()
        self.stdout.write(self.style.SUCCESS(
            f"Added {len(created)} default tests" + (" and the urine test." if urine_created else ".")
        ))
