# accounting/commands.py
"""
Command layer for voucher operations.

Commands are the single point where voucher state changes happen.
Views call commands; commands enforce rules and return a CommandResult.

Pattern:
1. Validate permissions (require)
2. Lock the voucher row (select_for_update, scoped to actor.company)
3. Apply lifecycle policies and entry validation
4. Perform the writes inside command_writes_allowed()
5. Return CommandResult

Every command runs in one transaction.atomic block: a failed command leaves
the voucher and the ledger untouched.
"""

from decimal import Decimal
import logging

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from accounts.authz import ActorContext, require
from accounting import chart
from accounting.errors import (
    ReversalBeforeVoucherDate,
    VoucherError,
    VoucherNotFound,
    VoucherTypeNotFound,
)
from accounting.materializer import materialize, reverse
from accounting.models import LedgerTransaction, Voucher, VoucherEntry, VoucherType
from accounting.policies import DELETED, EDITED, can_select_account, transition_error
from accounting.sequences import VOUCHER_NUMBER_SEQUENCE, next_company_sequence
from accounting.validators import (
    EntryInput,
    clean_draft_entries,
    coerce_entries,
    totals,
    validate_entries,
)
from projections.write_barrier import admin_emergency_writes_allowed, command_writes_allowed

logger = logging.getLogger(__name__)

HEADER_FIELDS = ("voucher_date", "reference_number", "narration", "voucher_number")


class CommandResult:
    """
    Wrapper for command results with success/failure info.

    Usage:
        result = post_voucher(actor, voucher_id)
        if result.success:
            voucher = result.data
        else:
            message = result.error      # human readable
            failure = result.failure    # typed VoucherError, when there is one
    """

    def __init__(self, success: bool, data=None, error: str = None, failure: VoucherError = None):
        self.success = success
        self.data = data
        self.error = error
        self.failure = failure

    @classmethod
    def ok(cls, data=None):
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error):
        if isinstance(error, VoucherError):
            return cls(success=False, error=str(error), failure=error)
        return cls(success=False, error=error)


def _balance_epsilon() -> Decimal:
    return Decimal(str(getattr(settings, "LEDGER_BALANCE_EPSILON", "0.005")))


def _lock_voucher(actor: ActorContext, voucher_id) -> Voucher | None:
    try:
        return Voucher.objects.select_for_update().select_related("voucher_type").get(
            pk=voucher_id, company=actor.company
        )
    except (Voucher.DoesNotExist, ValueError, TypeError):
        return None


def _entry_inputs(voucher: Voucher) -> list[EntryInput]:
    return [
        EntryInput(
            account_id=entry.account_id,
            debit=entry.debit_amount,
            credit=entry.credit_amount,
            narration=entry.narration,
        )
        for entry in voucher.entries.order_by("line_no")
    ]


def _allocate_voucher_number(company, voucher_type: VoucherType) -> str:
    name = VOUCHER_NUMBER_SEQUENCE.format(code=voucher_type.code)
    while True:
        number = voucher_type.format_number(next_company_sequence(company, name))
        # Skip values already taken by manually numbered vouchers.
        if not Voucher.objects.filter(company=company, voucher_number=number).exists():
            return number


def _replace_entries(actor: ActorContext, voucher: Voucher, raw_entries) -> VoucherError | str | None:
    """Validate a draft's new entry set and swap it in. Returns a failure or None."""
    try:
        entries = coerce_entries(raw_entries)
    except ValueError as exc:
        return str(exc)

    known = chart.known_account_ids(actor.company, [e.account_id for e in entries])
    entries, error = clean_draft_entries(entries, known)
    if error:
        return error

    accounts = chart.accounts_by_id(actor.company, known)
    for entry in entries:
        allowed, reason = can_select_account(accounts[entry.account_id])
        if not allowed:
            return reason

    total_debit, _ = totals(entries)
    with command_writes_allowed():
        VoucherEntry.objects.filter(voucher=voucher).delete()
        VoucherEntry.objects.bulk_create([
            VoucherEntry(
                company=actor.company,
                voucher=voucher,
                line_no=line_no,
                account_id=entry.account_id,
                debit_amount=entry.debit,
                credit_amount=entry.credit,
                narration=entry.narration,
            )
            for line_no, entry in enumerate(entries, start=1)
        ])
        voucher.total_amount = total_debit
        voucher.save(update_fields=["total_amount", "updated_at"])
    return None


# =============================================================================
# Draft commands
# =============================================================================

@transaction.atomic
def create_voucher(
    actor: ActorContext,
    voucher_type_id: int,
    voucher_date,
    voucher_number: str = "",
    reference_number: str = "",
    narration: str = "",
    entries=None,
) -> CommandResult:
    """
    Create a voucher in draft.

    The voucher starts with total_amount 0 and no entries unless `entries` is
    given. Without an explicit number, the next "<prefix>-<n>" of the voucher
    type is allocated.
    """
    require(actor, "vouchers.create")

    voucher_type = VoucherType.objects.filter(company=actor.company, pk=voucher_type_id).first()
    if not voucher_type:
        return CommandResult.fail(VoucherTypeNotFound(voucher_type_id))
    if not voucher_type.is_active:
        return CommandResult.fail(f"Voucher type {voucher_type.name} is inactive.")

    voucher_number = (voucher_number or "").strip()
    if voucher_number:
        if Voucher.objects.filter(company=actor.company, voucher_number=voucher_number).exists():
            return CommandResult.fail(f"Voucher number {voucher_number} already exists.")
    else:
        voucher_number = _allocate_voucher_number(actor.company, voucher_type)

    with command_writes_allowed():
        voucher = Voucher.objects.create(
            company=actor.company,
            voucher_type=voucher_type,
            voucher_number=voucher_number,
            voucher_date=voucher_date,
            reference_number=reference_number or "",
            narration=narration or "",
            status=Voucher.Status.DRAFT,
            total_amount=Decimal("0.00"),
            created_by=actor.user,
        )

    if entries:
        failure = _replace_entries(actor, voucher, entries)
        if failure:
            transaction.set_rollback(True)
            return CommandResult.fail(failure)

    logger.info(
        "Voucher %s created as draft",
        voucher.voucher_number,
        extra={"company_id": actor.company.id, "voucher_id": voucher.id},
    )
    return CommandResult.ok(voucher)


@transaction.atomic
def update_voucher(actor: ActorContext, voucher_id: int, entries=None, **changes) -> CommandResult:
    """
    Edit header fields (and optionally replace entries) of a draft voucher.

    Accepted fields: voucher_date, reference_number, narration,
    voucher_number, voucher_type_id.
    """
    require(actor, "vouchers.edit_draft")

    voucher = _lock_voucher(actor, voucher_id)
    if not voucher:
        return CommandResult.fail(VoucherNotFound(voucher_id))

    error = transition_error(voucher.status, EDITED)
    if error:
        return CommandResult.fail(error)

    update_fields = ["updated_at"]
    for field in HEADER_FIELDS:
        if field in changes and changes[field] is not None:
            setattr(voucher, field, changes[field])
            update_fields.append(field)

    if "voucher_number" in update_fields:
        voucher.voucher_number = voucher.voucher_number.strip()
        if not voucher.voucher_number:
            return CommandResult.fail("Voucher number is required.")
        taken = Voucher.objects.filter(
            company=actor.company, voucher_number=voucher.voucher_number,
        ).exclude(pk=voucher.pk).exists()
        if taken:
            return CommandResult.fail(f"Voucher number {voucher.voucher_number} already exists.")

    if changes.get("voucher_type_id") is not None:
        voucher_type = VoucherType.objects.filter(
            company=actor.company, pk=changes["voucher_type_id"],
        ).first()
        if not voucher_type:
            return CommandResult.fail(VoucherTypeNotFound(changes["voucher_type_id"]))
        voucher.voucher_type = voucher_type
        update_fields.append("voucher_type")

    with command_writes_allowed():
        voucher.save(update_fields=update_fields)

    if entries is not None:
        failure = _replace_entries(actor, voucher, entries)
        if failure:
            transaction.set_rollback(True)
            return CommandResult.fail(failure)

    return CommandResult.ok(voucher)


@transaction.atomic
def set_voucher_entries(actor: ActorContext, voucher_id: int, entries) -> CommandResult:
    """Replace all entries of a draft voucher. Blank lines are dropped."""
    require(actor, "vouchers.edit_draft")

    voucher = _lock_voucher(actor, voucher_id)
    if not voucher:
        return CommandResult.fail(VoucherNotFound(voucher_id))

    error = transition_error(voucher.status, EDITED)
    if error:
        return CommandResult.fail(error)

    failure = _replace_entries(actor, voucher, entries)
    if failure:
        transaction.set_rollback(True)
        return CommandResult.fail(failure)
    return CommandResult.ok(voucher)


@transaction.atomic
def delete_voucher(actor: ActorContext, voucher_id: int) -> CommandResult:
    """
    Hard-delete a draft voucher and its entries.

    Posted and cancelled vouchers have a ledger footprint and cannot be
    deleted here; cancel them instead (see purge_voucher for the privileged
    override).
    """
    require(actor, "vouchers.edit_draft")

    voucher = _lock_voucher(actor, voucher_id)
    if not voucher:
        return CommandResult.fail(VoucherNotFound(voucher_id))

    error = transition_error(voucher.status, DELETED)
    if error:
        return CommandResult.fail(error)

    voucher_number = voucher.voucher_number
    with command_writes_allowed():
        voucher.delete()

    logger.info(
        "Draft voucher %s deleted",
        voucher_number,
        extra={"company_id": actor.company.id, "voucher_id": voucher_id},
    )
    return CommandResult.ok({"voucher_number": voucher_number})


# =============================================================================
# Lifecycle transitions
# =============================================================================

@transaction.atomic
def post_voucher(actor: ActorContext, voucher_id: int) -> CommandResult:
    """
    Post a draft voucher: validate, lock the total, materialize the ledger.

    The status change is a conditional update guarded by status=draft, so
    two concurrent posts of the same voucher materialize at most once.
    """
    require(actor, "vouchers.post")

    voucher = _lock_voucher(actor, voucher_id)
    if not voucher:
        return CommandResult.fail(VoucherNotFound(voucher_id))

    error = transition_error(voucher.status, Voucher.Status.POSTED)
    if error:
        return CommandResult.fail(error)

    entries = _entry_inputs(voucher)
    known = chart.known_account_ids(actor.company, [e.account_id for e in entries])
    error = validate_entries(entries, known, epsilon=_balance_epsilon())
    if error:
        return CommandResult.fail(error)

    total_debit, _ = totals(entries)
    posted_at = timezone.now()
    with command_writes_allowed():
        updated = Voucher.objects.filter(
            pk=voucher.pk,
            status=Voucher.Status.DRAFT,
        ).update(
            status=Voucher.Status.POSTED,
            total_amount=total_debit,
            posted_at=posted_at,
            posted_by=actor.user,
            updated_at=posted_at,
        )
    if updated != 1:
        return CommandResult.fail(transition_error(Voucher.Status.POSTED, Voucher.Status.POSTED))

    voucher.refresh_from_db()
    rows = materialize(voucher)

    logger.info(
        "Voucher %s posted",
        voucher.voucher_number,
        extra={
            "company_id": actor.company.id,
            "voucher_id": voucher.id,
            "ledger_rows": len(rows),
            "total_amount": str(total_debit),
        },
    )
    return CommandResult.ok(voucher)


@transaction.atomic
def cancel_voucher(actor: ActorContext, voucher_id: int, on_date=None) -> CommandResult:
    """
    Cancel a posted voucher by appending reversing ledger rows.

    Reversals are dated `on_date`, not the voucher date. Without one they are
    dated today, or on the voucher date for a voucher dated in the future.
    The original rows stay untouched.
    """
    require(actor, "vouchers.cancel")

    voucher = _lock_voucher(actor, voucher_id)
    if not voucher:
        return CommandResult.fail(VoucherNotFound(voucher_id))

    error = transition_error(voucher.status, Voucher.Status.CANCELLED)
    if error:
        return CommandResult.fail(error)

    if on_date is None:
        on_date = max(timezone.localdate(), voucher.voucher_date)
    elif on_date < voucher.voucher_date:
        return CommandResult.fail(ReversalBeforeVoucherDate(on_date, voucher.voucher_date))

    cancelled_at = timezone.now()
    with command_writes_allowed():
        updated = Voucher.objects.filter(
            pk=voucher.pk,
            status=Voucher.Status.POSTED,
        ).update(
            status=Voucher.Status.CANCELLED,
            cancelled_at=cancelled_at,
            cancelled_by=actor.user,
            updated_at=cancelled_at,
        )
    if updated != 1:
        return CommandResult.fail(transition_error(Voucher.Status.CANCELLED, Voucher.Status.CANCELLED))

    voucher.refresh_from_db()
    rows = reverse(voucher, on_date=on_date)

    logger.info(
        "Voucher %s cancelled",
        voucher.voucher_number,
        extra={
            "company_id": actor.company.id,
            "voucher_id": voucher.id,
            "reversal_rows": len(rows),
        },
    )
    return CommandResult.ok(voucher)


@transaction.atomic
def purge_voucher(actor: ActorContext, voucher_id: int, reason: str = "") -> CommandResult:
    """
    Irreversibly delete a voucher of any status together with its ledger rows.

    Breaks the append-only ledger, so it needs the vouchers.purge capability
    (never a role default) and settings.ALLOW_ADMIN_EMERGENCY_WRITES.
    """
    require(actor, "vouchers.purge")

    if not getattr(settings, "ALLOW_ADMIN_EMERGENCY_WRITES", False):
        return CommandResult.fail("Purging vouchers is disabled on this installation.")

    voucher = _lock_voucher(actor, voucher_id)
    if not voucher:
        return CommandResult.fail(VoucherNotFound(voucher_id))

    voucher_number = voucher.voucher_number
    status = voucher.status
    with admin_emergency_writes_allowed():
        removed, _ = LedgerTransaction.objects.filter(voucher=voucher).delete()
        voucher.delete()

    logger.warning(
        "Voucher %s (%s) purged with %s ledger rows",
        voucher_number,
        status,
        removed,
        extra={
            "company_id": actor.company.id,
            "voucher_id": voucher_id,
            "purged_by": actor.user.id,
            "reason": reason,
        },
    )
    return CommandResult.ok({"voucher_number": voucher_number, "ledger_rows_removed": removed})
