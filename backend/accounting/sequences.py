# accounting/sequences.py
from django.db import IntegrityError, transaction

from accounting.models import CompanySequence
from projections.write_barrier import command_writes_allowed

VOUCHER_NUMBER_SEQUENCE = "voucher_number:{code}"
LEDGER_SEQUENCE = "ledger_transaction"


def next_company_sequence(company, name: str, count: int = 1) -> int:
    """
    Reserve `count` consecutive values for a company/name pair.
    Returns the first reserved value. Uses select_for_update to avoid
    concurrent duplicates, so callers must be inside a transaction.
    """
    with command_writes_allowed():
        try:
            seq = CompanySequence.objects.select_for_update().get(
                company=company,
                name=name,
            )
        except CompanySequence.DoesNotExist:
            try:
                with transaction.atomic():
                    seq = CompanySequence.objects.create(
                        company=company,
                        name=name,
                        next_value=1,
                    )
            except IntegrityError:
                seq = CompanySequence.objects.select_for_update().get(
                    company=company,
                    name=name,
                )

        value = seq.next_value
        seq.next_value = value + count
        seq.save(update_fields=["next_value", "updated_at"])
        return value
