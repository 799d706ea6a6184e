# accounting/tests/test_voucher_workflow.py
"""
Integration tests for the voucher workflow.

These tests go through the API to verify the full lifecycle of a voucher:
create (draft) -> post -> ledger -> cancel -> export.

Tests verify the API responses rather than direct database queries
to avoid transaction isolation issues between the API client and
test database connections.
"""
from django.contrib.auth import get_user_model
from django.test import TransactionTestCase
from rest_framework.test import APIClient

from accounts.models import Company, CompanyMembership
from accounts.permissions import grant_role_defaults
from accounting.defaults import seed_company_defaults
from accounting.models import Account, AccountGroup, VoucherType
from projections.write_barrier import bootstrap_writes_allowed


class TestVoucherThinFlow(TransactionTestCase):
    """
    Thin integration test (API-level):
    - Create voucher (DRAFT)
    - Post -> POSTED, ledger rows appear
    - Cancel -> CANCELLED, ledger nets to zero
    - Export the ledger as CSV
    """

    def setUp(self):
        self.client = APIClient()
        User = get_user_model()

        self.user = User.objects.create_user(
            email="tester@example.com",
            password="pass12345",
            name="Tester",
        )
        self.company = Company.objects.create(
            name="Test Co",
            slug="testco",
            default_currency="INR",
        )
        seed_company_defaults(self.company)

        self.membership = CompanyMembership.objects.create(
            user=self.user,
            company=self.company,
            role=CompanyMembership.Role.OWNER,
            is_active=True,
        )
        grant_role_defaults(self.membership, granted_by=self.user)

        self.user.active_company = self.company
        self.user.save(update_fields=["active_company"])
        self.client.force_authenticate(user=self.user)

        with bootstrap_writes_allowed():
            cash_group = AccountGroup.objects.get(company=self.company, name="Cash & Bank")
            self.cash = Account.objects.create(
                company=self.company, code="1000", name="Cash A/c", group=cash_group,
            )
            self.sales = Account.objects.create(
                company=self.company, code="4000", name="Sales A/c",
            )
        self.receipt = VoucherType.objects.get(company=self.company, code="RECEIPT")

    def _payload(self, debit="5000.00", credit="5000.00"):
        return {
            "voucher_type_id": self.receipt.id,
            "voucher_date": "2026-04-01",
            "narration": "Audit fee",
            "entries": [
                {"account_id": self.cash.id, "debit": debit, "credit": "0"},
                {"account_id": self.sales.id, "debit": "0", "credit": credit},
            ],
        }

    def test_voucher_full_lifecycle(self):
        # 1) Create -> DRAFT
        r = self.client.post("/api/accounting/vouchers/", self._payload(), format="json")
        self.assertEqual(r.status_code, 201, r.data)
        voucher_id = r.data["id"]
        self.assertEqual(r.data["status"], "draft")
        self.assertEqual(r.data["voucher_number"], "RCT-000001")
        self.assertEqual(r.data["tile"], {"primary": "Cash A/c", "secondary": "Sales A/c"})

        # 2) Draft has no ledger rows yet
        r = self.client.get(f"/api/reports/ledger/{self.cash.id}/")
        self.assertEqual(r.status_code, 200, r.data)
        self.assertEqual(r.data["lines"], [])

        # 3) Post -> POSTED
        r = self.client.post(f"/api/accounting/vouchers/{voucher_id}/post/", {}, format="json")
        self.assertEqual(r.status_code, 200, r.data)
        self.assertEqual(r.data["status"], "posted")
        self.assertEqual(r.data["total_amount"], "5000.00")

        # 4) Posting twice is refused
        r = self.client.post(f"/api/accounting/vouchers/{voucher_id}/post/", {}, format="json")
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.data["code"], "invalid_transition")

        # 5) Ledger views
        r = self.client.get(f"/api/reports/ledger/{self.sales.id}/")
        self.assertEqual(r.status_code, 200, r.data)
        [line] = r.data["lines"]
        self.assertEqual(line["particulars"], "Cash A/c")
        self.assertEqual(line["balance_display"], "5000.00 Cr")
        self.assertEqual(line["display_date"], "01/04/2026")
        self.assertEqual(r.data["closing_side"], "Cr")

        # 6) Cancel -> CANCELLED
        r = self.client.post(
            f"/api/accounting/vouchers/{voucher_id}/cancel/", {"on_date": "2026-04-02"}, format="json",
        )
        self.assertEqual(r.status_code, 200, r.data)
        self.assertEqual(r.data["status"], "cancelled")

        r = self.client.get(f"/api/reports/ledger/{self.cash.id}/")
        self.assertEqual(len(r.data["lines"]), 2)
        self.assertEqual(r.data["closing_balance"], "0.00")
        self.assertTrue(r.data["lines"][1]["is_reversal"])

        # 7) Export
        r = self.client.get(f"/api/reports/ledger/{self.cash.id}/export/?format=csv")
        self.assertEqual(r.status_code, 200)
        rows = r.content.decode("utf-8").splitlines()
        self.assertEqual(rows[0], '"Date","Voucher No","Type","Particulars","Debit","Credit","Balance"')
        self.assertEqual(rows[1], '"01/04/2026","RCT-000001","Receipt","Sales A/c","5000.00","0.00","5000.00"')
        self.assertEqual(len(rows), 3)

        # 8) Trial balance is empty after cancellation
        r = self.client.get("/api/reports/trial-balance/")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data["total_debit"], "0.00")
        self.assertTrue(r.data["is_balanced"])

    def test_unbalanced_voucher_cannot_be_posted(self):
        r = self.client.post(
            "/api/accounting/vouchers/", self._payload(credit="4000.00"), format="json",
        )
        self.assertEqual(r.status_code, 201, r.data)

        r = self.client.post(f"/api/accounting/vouchers/{r.data['id']}/post/", {}, format="json")
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.data["code"], "unbalanced_voucher")
        self.assertEqual(r.data["difference"], "1000.00")

    def test_draft_edit_and_delete(self):
        r = self.client.post("/api/accounting/vouchers/", self._payload(), format="json")
        voucher_id = r.data["id"]

        r = self.client.patch(
            f"/api/accounting/vouchers/{voucher_id}/", {"narration": "Audit fee FY26"}, format="json",
        )
        self.assertEqual(r.status_code, 200, r.data)
        self.assertEqual(r.data["narration"], "Audit fee FY26")

        r = self.client.get(f"/api/accounting/vouchers/{voucher_id}/")
        self.assertEqual(r.data["detail"]["totals"], {"debit": "5000.00", "credit": "5000.00"})

        r = self.client.delete(f"/api/accounting/vouchers/{voucher_id}/")
        self.assertEqual(r.status_code, 204)

        r = self.client.get(f"/api/accounting/vouchers/{voucher_id}/")
        self.assertEqual(r.status_code, 404)

    def test_unknown_records(self):
        r = self.client.post("/api/accounting/vouchers/999999/post/", {}, format="json")
        self.assertEqual(r.status_code, 404)
        self.assertEqual(r.data["code"], "not_found")

        r = self.client.get("/api/reports/ledger/999999/")
        self.assertEqual(r.status_code, 404)

    def test_bad_entry_is_rejected(self):
        payload = self._payload()
        payload["entries"][0]["account_id"] = "cash"
        r = self.client.post("/api/accounting/vouchers/", payload, format="json")
        self.assertEqual(r.status_code, 400)

    def test_amounts_must_be_finite_whole_cents(self):
        for debit, credit in (("NaN", "NaN"), ("Infinity", "Infinity"), ("0.004", "0.004")):
            r = self.client.post(
                "/api/accounting/vouchers/", self._payload(debit=debit, credit=credit), format="json",
            )
            self.assertEqual(r.status_code, 400, (debit, r.data))
            self.assertIn("entries", r.data)

        r = self.client.get("/api/accounting/vouchers/")
        self.assertEqual(r.data, [])

    def test_voucher_list_filters_are_validated(self):
        self.client.post("/api/accounting/vouchers/", self._payload(), format="json")

        r = self.client.get("/api/accounting/vouchers/?voucher_type=abc")
        self.assertEqual(r.status_code, 400)
        self.assertIn("voucher_type", r.data)

        r = self.client.get(f"/api/accounting/vouchers/?voucher_type={self.receipt.id}")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(len(r.data), 1)

        r = self.client.get(f"/api/reports/ledger/{self.cash.id}/?min_amount=NaN")
        self.assertEqual(r.status_code, 400)

    def test_cancel_before_voucher_date_is_refused(self):
        r = self.client.post("/api/accounting/vouchers/", self._payload(), format="json")
        voucher_id = r.data["id"]
        self.client.post(f"/api/accounting/vouchers/{voucher_id}/post/", {}, format="json")

        r = self.client.post(
            f"/api/accounting/vouchers/{voucher_id}/cancel/", {"on_date": "2026-03-31"}, format="json",
        )
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.data["code"], "reversal_before_voucher_date")

        r = self.client.get(f"/api/accounting/vouchers/{voucher_id}/")
        self.assertEqual(r.data["status"], "posted")
