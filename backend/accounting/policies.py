# accounting/policies.py
"""
Business policy functions for voucher operations.

Policies answer: "Is this action allowed given the current state?"
They do NOT perform the action; that's the command's job.

Usage:
    error = transition_error(voucher.status, Voucher.Status.POSTED)
    if error:
        return CommandResult.fail(error)

    allowed, reason = can_select_account(account)
    if not allowed:
        return CommandResult.fail(reason)
"""

from accounting.errors import InvalidTransition


# Lifecycle edges. "edited" and "deleted" are pseudo-states for draft-only
# mutations and hard deletes.
EDITED = "edited"
DELETED = "deleted"

ALLOWED_TRANSITIONS = {
    ("draft", "posted"),
    ("posted", "cancelled"),
    ("draft", EDITED),
    ("draft", DELETED),
}


# =============================================================================
# Lifecycle Policies
# =============================================================================

def transition_error(old_status: str, new_status: str) -> InvalidTransition | None:
    """
    Return InvalidTransition unless (old_status -> new_status) is a lifecycle edge.

    posted and cancelled are terminal for entry edits; a draft is deleted,
    never cancelled; a cancelled voucher cannot be cancelled again.
    """
    if (old_status, new_status) in ALLOWED_TRANSITIONS:
        return None
    return InvalidTransition(old_status, new_status)


# =============================================================================
# Account Policies
# =============================================================================

def can_select_account(account) -> tuple[bool, str]:
    """Inactive accounts stay visible in history but cannot take new entries."""
    if not account.is_active:
        return False, f"Account {account.code} is inactive."
    return True, ""
