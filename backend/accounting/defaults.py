# accounting/defaults.py
"""Default master data for a new company: account groups and voucher types."""

from django.db import transaction

from accounting.models import AccountGroup, VoucherType
from projections.write_barrier import bootstrap_writes_allowed

DEFAULT_ACCOUNT_GROUPS = [
    ("Current Assets", AccountGroup.AccountType.ASSET),
    ("Cash & Bank", AccountGroup.AccountType.ASSET),
    ("Accounts Receivable", AccountGroup.AccountType.ASSET),
    ("Fixed Assets", AccountGroup.AccountType.ASSET),
    ("Current Liabilities", AccountGroup.AccountType.LIABILITY),
    ("Accounts Payable", AccountGroup.AccountType.LIABILITY),
    ("Tax Liabilities", AccountGroup.AccountType.LIABILITY),
    ("Professional Fees", AccountGroup.AccountType.INCOME),
    ("Consulting Income", AccountGroup.AccountType.INCOME),
    ("Other Income", AccountGroup.AccountType.INCOME),
    ("Operating Expenses", AccountGroup.AccountType.EXPENSE),
    ("Staff Costs", AccountGroup.AccountType.EXPENSE),
    ("Administrative Expenses", AccountGroup.AccountType.EXPENSE),
    ("Professional Expenses", AccountGroup.AccountType.EXPENSE),
    ("Travel & Conveyance", AccountGroup.AccountType.EXPENSE),
    ("Capital", AccountGroup.AccountType.EQUITY),
    ("Retained Earnings", AccountGroup.AccountType.EQUITY),
]

# (name, code, prefix)
DEFAULT_VOUCHER_TYPES = [
    ("Payment", "PAYMENT", "PAY"),
    ("Receipt", "RECEIPT", "RCT"),
    ("Journal", "JOURNAL", "JV"),
    ("Contra", "CONTRA", "CNT"),
    ("Credit Note", "CREDIT_NOTE", "CN"),
    ("Debit Note", "DEBIT_NOTE", "DN"),
]


@transaction.atomic
def seed_company_defaults(company) -> dict[str, int]:
    """Create missing default groups and voucher types. Safe to run repeatedly."""
    groups_created = 0
    types_created = 0

    with bootstrap_writes_allowed():
        for name, account_type in DEFAULT_ACCOUNT_GROUPS:
            _, created = AccountGroup.objects.get_or_create(
                company=company,
                name=name,
                defaults={"account_type": account_type},
            )
            groups_created += int(created)

        for name, code, prefix in DEFAULT_VOUCHER_TYPES:
            _, created = VoucherType.objects.get_or_create(
                company=company,
                code=code,
                defaults={"name": name, "prefix": prefix, "number_width": 6},
            )
            types_created += int(created)

    return {"account_groups": groups_created, "voucher_types": types_created}
