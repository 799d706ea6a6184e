# accounting/chart.py
"""Read-only access to a company's chart of accounts."""

from accounting.errors import AccountNotFound
from accounting.models import Account


def lookup(company, account_id) -> Account:
    """Return the account or raise AccountNotFound. Inactive accounts resolve too."""
    try:
        return Account.objects.select_related("group").get(company=company, pk=account_id)
    except (Account.DoesNotExist, ValueError, TypeError):
        raise AccountNotFound(account_id)


def list_active(company):
    return Account.objects.filter(company=company, is_active=True).select_related("group").order_by("code")


def known_account_ids(company, account_ids) -> set[int]:
    """Subset of `account_ids` that exist in the company's chart."""
    ids = {a for a in account_ids if isinstance(a, int)}
    return set(
        Account.objects.filter(company=company, pk__in=ids).values_list("pk", flat=True)
    )


def accounts_by_id(company, account_ids) -> dict[int, Account]:
    return Account.objects.filter(company=company, pk__in=set(account_ids)).in_bulk()
