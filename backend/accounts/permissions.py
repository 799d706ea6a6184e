# accounts/permissions.py
from __future__ import annotations

from typing import Iterable, Optional
from django.db import transaction
from django.contrib.auth import get_user_model

from accounts.models import AppPermission, CompanyMembership, CompanyMembershipPermission
from accounts.permission_defaults import ROLE_DEFAULTS

User = get_user_model()


def _ensure_permissions(codes: Iterable[str]) -> list[AppPermission]:
    codes = set(codes)
    existing = set(AppPermission.objects.filter(code__in=codes).values_list("code", flat=True))
    missing = [c for c in codes if c not in existing]
    if missing:
        AppPermission.objects.bulk_create(
            [AppPermission(code=c, name=c, module=c.split(".")[0]) for c in missing],
            ignore_conflicts=True,
        )
    return list(AppPermission.objects.filter(code__in=codes))


def _grant(membership: CompanyMembership, perms: list[AppPermission], granted_by) -> int:
    already = set(
        CompanyMembershipPermission.objects.filter(
            membership=membership,
            permission__in=perms,
        ).values_list("permission__code", flat=True)
    )
    to_grant = [p for p in perms if p.code not in already]
    if not to_grant:
        return 0

    CompanyMembershipPermission.objects.bulk_create(
        [
            CompanyMembershipPermission(
                membership=membership,
                company=membership.company,
                permission=p,
                granted_by=granted_by if (granted_by and granted_by.is_authenticated) else None,
            )
            for p in to_grant
        ],
        ignore_conflicts=True,
    )
    return len(to_grant)


@transaction.atomic
def grant_role_defaults(
    membership: CompanyMembership,
    granted_by: Optional[User] = None,
    overwrite: bool = False,
) -> int:
    """
    Grant default permissions for the membership.role.

    - Idempotent by default: only grants missing codes.
    - If overwrite=True: first removes existing permissions then grants defaults.
    Returns number of permissions newly granted.
    """
    if overwrite:
        CompanyMembershipPermission.objects.filter(membership=membership).delete()

    perms = _ensure_permissions(ROLE_DEFAULTS.get(membership.role, set()))
    return _grant(membership, perms, granted_by)


@transaction.atomic
def grant_permissions(
    membership: CompanyMembership,
    codes: Iterable[str],
    granted_by: Optional[User] = None,
) -> int:
    """Grant explicit codes (including privileged ones) to a membership."""
    return _grant(membership, _ensure_permissions(codes), granted_by)
