# tests/conftest.py
"""
Pytest fixtures for the voucher engine tests.

- ActorContext requires: user, company, membership, perms
- Master data (accounts, voucher types) is created inside
  bootstrap_writes_allowed(), the same way seeding does it
- Vouchers are created through the command layer
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from django.conf import settings
from django.contrib.auth import get_user_model

from accounts.authz import ActorContext
from accounts.models import Company, CompanyMembership
from accounts.permissions import grant_role_defaults
from accounting.commands import create_voucher, post_voucher
from accounting.defaults import seed_company_defaults
from accounting.models import Account, AccountGroup, VoucherType
from projections.write_barrier import bootstrap_writes_allowed


User = get_user_model()


@pytest.fixture(autouse=True, scope="session")
def _testing_settings():
    settings.TESTING = True
    settings.LEDGER_BALANCE_EPSILON = "0.005"


def build_actor(user, company, membership) -> ActorContext:
    return ActorContext(
        user=user,
        company=company,
        membership=membership,
        perms=frozenset(membership.permissions.values_list("code", flat=True)),
    )


# =============================================================================
# Company & User Fixtures
# =============================================================================

@pytest.fixture
def company(db):
    """Create a test company with default groups and voucher types."""
    company = Company.objects.create(
        name="Test Practice",
        slug="test-practice",
        default_currency="INR",
    )
    seed_company_defaults(company)
    return company


@pytest.fixture
def second_company(db):
    """Create a second test company for multi-tenant tests."""
    company = Company.objects.create(
        name="Second Practice",
        slug="second-practice",
    )
    seed_company_defaults(company)
    return company


@pytest.fixture
def user(db, company):
    """Create a test user with owner membership."""
    user = User.objects.create_user(
        email="owner@test.com",
        password="testpass123",
        name="Test Owner",
    )
    user.active_company = company
    user.save()
    return user


@pytest.fixture
def owner_membership(db, company, user):
    return CompanyMembership.objects.create(
        public_id=uuid4(),
        company=company,
        user=user,
        role=CompanyMembership.Role.OWNER,
        is_active=True,
    )


@pytest.fixture
def actor(user, company, owner_membership):
    """ActorContext for the company owner."""
    return build_actor(user, company, owner_membership)


@pytest.fixture
def make_actor(db, company):
    """Factory: an ActorContext for a new member with the role's default grants."""
    counter = {"n": 0}

    def _make(role=CompanyMembership.Role.USER, target_company=None):
        target_company = target_company or company
        counter["n"] += 1
        member = User.objects.create_user(
            email=f"{role.lower()}{counter['n']}@test.com",
            password="testpass123",
            name=f"{role.title()} {counter['n']}",
        )
        member.active_company = target_company
        member.save()
        membership = CompanyMembership.objects.create(
            company=target_company,
            user=member,
            role=role,
            is_active=True,
        )
        grant_role_defaults(membership)
        return build_actor(member, target_company, membership)

    return _make


# =============================================================================
# Chart of Accounts / Voucher Types
# =============================================================================

def create_account(company, code, name, group_name=None, is_active=True) -> Account:
    with bootstrap_writes_allowed():
        group = None
        if group_name:
            group = AccountGroup.objects.get(company=company, name=group_name)
        return Account.objects.create(
            company=company,
            code=code,
            name=name,
            group=group,
            is_active=is_active,
        )


@pytest.fixture
def accounts(company):
    """A small chart: cash, bank, sales, rent, capital and an inactive account."""
    return {
        "cash": create_account(company, "1000", "Cash A/c", "Cash & Bank"),
        "bank": create_account(company, "1100", "Bank A/c", "Cash & Bank"),
        "sales": create_account(company, "4000", "Sales A/c", "Professional Fees"),
        "rent": create_account(company, "5000", "Rent A/c", "Operating Expenses"),
        "capital": create_account(company, "3000", "Capital A/c", "Capital"),
        "old": create_account(company, "1999", "Old Petty Cash", "Cash & Bank", is_active=False),
    }


@pytest.fixture
def voucher_types(company):
    return {vt.code: vt for vt in VoucherType.objects.filter(company=company)}


# =============================================================================
# Voucher helpers
# =============================================================================

def line(account, debit="0", credit="0", narration=""):
    return {
        "account_id": account.pk,
        "debit": Decimal(debit),
        "credit": Decimal(credit),
        "narration": narration,
    }


@pytest.fixture
def make_draft(actor, voucher_types):
    """Factory: a draft voucher created through create_voucher."""

    def _make(entries, voucher_type="JOURNAL", voucher_date=date(2026, 4, 1), narration="", **kwargs):
        result = create_voucher(
            actor,
            voucher_type_id=voucher_types[voucher_type].pk,
            voucher_date=voucher_date,
            narration=narration,
            entries=entries,
            **kwargs,
        )
        assert result.success, result.error
        return result.data

    return _make


@pytest.fixture
def make_posted(actor, make_draft):
    """Factory: a voucher created and posted through the command layer."""

    def _make(entries, **kwargs):
        voucher = make_draft(entries, **kwargs)
        result = post_voucher(actor, voucher.pk)
        assert result.success, result.error
        return result.data

    return _make


@pytest.fixture
def entry():
    """The `line` helper as a fixture: entry(account, debit=..., credit=...)."""
    return line


@pytest.fixture
def add_account(company):
    def _add(code, name, group_name=None, is_active=True, target_company=None):
        return create_account(target_company or company, code, name, group_name, is_active)

    return _add
