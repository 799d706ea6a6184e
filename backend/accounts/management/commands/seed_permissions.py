# accounts/management/commands/seed_permissions.py

from django.core.management.base import BaseCommand
from accounts.models import AppPermission
from accounts.permission_defaults import all_permission_codes


class Command(BaseCommand):
    help = "Seed the capability codes used by voucher and ledger operations"

    def handle(self, *args, **options):
        created = 0
        updated = 0

        for code in sorted(all_permission_codes()):
            _, was_created = AppPermission.objects.update_or_create(
                code=code,
                defaults={
                    "name": code,
                    "module": code.split(".")[0],
                },
            )
            if was_created:
                created += 1
            else:
                updated += 1

        self.stdout.write(self.style.SUCCESS(f"Done! Created {created}, updated {updated}."))
