# accounting/management/commands/seed_accounting_defaults.py

from django.core.management.base import BaseCommand, CommandError

from accounts.models import Company
from accounting.defaults import seed_company_defaults


class Command(BaseCommand):
    help = "Create default account groups and voucher types for companies"

    def add_arguments(self, parser):
        parser.add_argument(
            "--company",
            help="Company slug (default: all active companies)",
        )

    def handle(self, *args, **options):
        companies = Company.objects.filter(is_active=True)
        if options.get("company"):
            companies = companies.filter(slug=options["company"])
            if not companies.exists():
                raise CommandError(f"Company '{options['company']}' not found.")

        for company in companies:
            counts = seed_company_defaults(company)
            self.stdout.write(
                f"{company.slug}: {counts['account_groups']} groups, "
                f"{counts['voucher_types']} voucher types created"
            )
        self.stdout.write(self.style.SUCCESS("Done!"))
