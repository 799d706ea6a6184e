# accounts/authz.py
"""
Authorization for voucher and ledger operations.

Commands never inspect roles themselves. The caller resolves an ActorContext
once per request and commands call require(actor, code) as a precondition.

Permission order:
1. Inactive membership: nothing is allowed
2. OWNER: implicit allow
3. Everyone else: explicit grants only (role defaults + manual grants)
"""

from dataclasses import dataclass
from typing import FrozenSet
from django.core.exceptions import PermissionDenied
from rest_framework.exceptions import NotAuthenticated

from accounts.models import CompanyMembership, Company


@dataclass(frozen=True)
class ActorContext:
    """
    Immutable context for the current actor (user + company).

    Attributes:
        user: The authenticated user
        company: The active company (tenant)
        membership: The user's membership in the company
        perms: Set of explicit permission codes the user has
    """
    user: object
    company: Company
    membership: CompanyMembership
    perms: FrozenSet[str]

    def has(self, code: str) -> bool:
        if not self.membership.is_active:
            return False
        if self.membership.role == CompanyMembership.Role.OWNER:
            return True
        if code in self.perms:
            return True
        # Grants may have changed after the context was built.
        return self.membership.permissions.filter(code=code).exists()

    @property
    def is_owner(self) -> bool:
        return self.membership.role == CompanyMembership.Role.OWNER

    @property
    def role(self) -> str:
        return self.membership.role


def resolve_actor(request) -> ActorContext:
    """
    Build the ActorContext for a DRF request.

    Membership and grants are loaded fresh on every request so revocations
    take effect immediately.

    Raises:
        NotAuthenticated: If user is not authenticated
        PermissionDenied: If user has no active company or membership
    """
    user = getattr(request, "user", None)

    if not user or not user.is_authenticated:
        raise NotAuthenticated("Authentication required.")

    company = getattr(user, "active_company", None)

    if not company:
        raise PermissionDenied("No active company selected. Please select a company first.")

    try:
        membership = CompanyMembership.objects.select_related(
            "company"
        ).prefetch_related(
            "permissions"
        ).get(
            user=user,
            company=company,
            is_active=True,
        )
    except CompanyMembership.DoesNotExist:
        raise PermissionDenied("You are not an active member of the selected company.")

    perms = frozenset(
        membership.permissions.values_list("code", flat=True)
    )

    return ActorContext(
        user=user,
        company=company,
        membership=membership,
        perms=perms,
    )


def require(actor: ActorContext, code: str) -> None:
    """
    Raise PermissionDenied unless the actor holds `code`.

    Example:
        require(actor, "vouchers.post")
    """
    if not actor.has(code):
        raise PermissionDenied(f"Permission denied: {code}")
