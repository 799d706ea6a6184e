# tests/test_ledger_projection.py
"""
Ledger projection, trial balance and voucher summaries, all rebuilt from
LedgerTransaction rows.
"""

from datetime import date
from decimal import Decimal

import pytest

from accounting.commands import cancel_voucher
from accounting.errors import AccountNotFound
from accounting.models import LedgerTransaction
from accounting.sequences import LEDGER_SEQUENCE, next_company_sequence
from accounting.summaries import (
    filter_vouchers,
    voucher_detail,
    voucher_tile,
    voucher_type_totals,
)
from projections.ledger import LedgerFilters, format_balance, project_ledger
from projections.trial_balance import get_trial_balance
from projections.write_barrier import ledger_writes_allowed


def balances(ledger):
    return [line.running_balance for line in ledger.lines]


@pytest.mark.django_db
class TestScenarios:
    def test_two_line_voucher_shows_dr_and_cr(self, company, make_posted, accounts, entry):
        make_posted([entry(accounts["cash"], debit="5000"), entry(accounts["sales"], credit="5000")])

        cash = project_ledger(company, accounts["cash"].pk)
        sales = project_ledger(company, accounts["sales"].pk)

        assert len(cash.lines) == 1
        assert cash.lines[0].running_balance == Decimal("5000.00")
        assert cash.lines[0].display_balance == "5000.00 Dr"
        assert cash.lines[0].particulars == "Sales A/c"
        assert len(sales.lines) == 1
        assert sales.lines[0].display_balance == "5000.00 Cr"
        assert sales.lines[0].particulars == "Cash A/c"
        assert sales.closing_side == "Cr"

    def test_cancelled_voucher_nets_to_zero(self, actor, company, make_posted, accounts, entry):
        voucher = make_posted(
            [entry(accounts["cash"], debit="1000"), entry(accounts["bank"], credit="1000")],
            voucher_date=date(2026, 4, 1),
        )
        cancel_voucher(actor, voucher.pk, on_date=date(2026, 4, 2))

        cash = project_ledger(company, accounts["cash"].pk)

        assert [(l.debit, l.credit) for l in cash.lines] == [
            (Decimal("1000.00"), Decimal("0.00")),
            (Decimal("0.00"), Decimal("1000.00")),
        ]
        assert balances(cash) == [Decimal("1000.00"), Decimal("0.00")]
        assert cash.closing_balance == Decimal("0.00")
        assert cash.lines[1].is_reversal

    def test_multi_account_voucher_has_no_single_counterpart(self, company, make_posted, add_account, entry):
        a = add_account("6100", "Travel")
        b = add_account("6200", "Meals")
        c = add_account("2100", "Card Payable")
        make_posted([entry(a, debit="600"), entry(b, debit="400"), entry(c, credit="1000")])

        for account in (a, b, c):
            ledger = project_ledger(company, account.pk)
            assert [l.particulars for l in ledger.lines] == ["Multiple entries"]

    def test_window_without_rows_closes_at_zero(self, company, make_posted, accounts, entry):
        make_posted(
            [entry(accounts["cash"], debit="700"), entry(accounts["sales"], credit="700")],
            voucher_date=date(2026, 4, 1),
        )

        ledger = project_ledger(
            company, accounts["cash"].pk,
            date_from=date(2026, 6, 1), date_to=date(2026, 6, 30),
        )

        assert ledger.lines == []
        assert ledger.closing_balance == Decimal("0.00")
        assert ledger.total_debit == ledger.total_credit == Decimal("0.00")


@pytest.mark.django_db
class TestOrdering:
    def test_rows_sort_by_date_then_insertion(self, company, make_posted, accounts, entry):
        make_posted([entry(accounts["cash"], debit="30"), entry(accounts["sales"], credit="30")],
                    voucher_date=date(2026, 4, 10))
        make_posted([entry(accounts["cash"], debit="10"), entry(accounts["sales"], credit="10")],
                    voucher_date=date(2026, 4, 2))
        make_posted([entry(accounts["rent"], debit="5"), entry(accounts["cash"], credit="5")],
                    voucher_date=date(2026, 4, 2))

        ledger = project_ledger(company, accounts["cash"].pk)

        assert [l.date for l in ledger.lines] == [date(2026, 4, 2), date(2026, 4, 2), date(2026, 4, 10)]
        assert balances(ledger) == [Decimal("10.00"), Decimal("5.00"), Decimal("35.00")]

    def test_projection_is_repeatable(self, company, make_posted, accounts, entry):
        for amount in ("1", "2", "3"):
            make_posted([entry(accounts["cash"], debit=amount), entry(accounts["bank"], credit=amount)])

        first = project_ledger(company, accounts["cash"].pk)
        second = project_ledger(company, accounts["cash"].pk)

        assert first.lines == second.lines

    def test_window_restarts_balance_at_zero(self, company, make_posted, accounts, entry):
        make_posted([entry(accounts["cash"], debit="100"), entry(accounts["sales"], credit="100")],
                    voucher_date=date(2026, 3, 31))
        make_posted([entry(accounts["cash"], debit="40"), entry(accounts["sales"], credit="40")],
                    voucher_date=date(2026, 4, 5))

        ledger = project_ledger(company, accounts["cash"].pk, date_from=date(2026, 4, 1))

        assert ledger.opening_balance == Decimal("0.00")
        assert balances(ledger) == [Decimal("40.00")]

    def test_opening_balance_on_request(self, company, make_posted, accounts, entry):
        make_posted([entry(accounts["cash"], debit="100"), entry(accounts["sales"], credit="100")],
                    voucher_date=date(2026, 3, 31))
        make_posted([entry(accounts["cash"], debit="40"), entry(accounts["sales"], credit="40")],
                    voucher_date=date(2026, 4, 5))

        ledger = project_ledger(
            company, accounts["cash"].pk,
            date_from=date(2026, 4, 1), include_opening_balance=True,
        )

        assert ledger.opening_balance == Decimal("100.00")
        assert balances(ledger) == [Decimal("140.00")]
        assert ledger.closing_balance == Decimal("140.00")


@pytest.mark.django_db
class TestFilters:
    @pytest.fixture
    def posted(self, make_posted, accounts, entry, voucher_types):
        make_posted([entry(accounts["cash"], debit="500"), entry(accounts["sales"], credit="500")],
                    voucher_type="RECEIPT", narration="Audit fee", voucher_date=date(2026, 4, 1))
        make_posted([entry(accounts["rent"], debit="200"), entry(accounts["cash"], credit="200")],
                    voucher_type="PAYMENT", narration="April rent", voucher_date=date(2026, 4, 2))
        make_posted([entry(accounts["cash"], debit="50"), entry(accounts["bank"], credit="50")],
                    voucher_type="CONTRA", narration="Withdrawal", voucher_date=date(2026, 4, 3))

    def test_filters_keep_true_running_balances(self, company, accounts, posted):
        full = project_ledger(company, accounts["cash"].pk)
        credits = project_ledger(company, accounts["cash"].pk, filters=LedgerFilters(side="credit"))

        assert balances(full) == [Decimal("500.00"), Decimal("300.00"), Decimal("350.00")]
        assert balances(credits) == [Decimal("300.00")]
        assert credits.closing_balance == Decimal("300.00")

    @pytest.mark.parametrize("filters", [
        LedgerFilters(side="debit"),
        LedgerFilters(search="rent"),
        LedgerFilters(search="bank a/c"),
        LedgerFilters(min_amount=Decimal("100")),
        LedgerFilters(max_amount=Decimal("200"), side="debit"),
    ])
    def test_totals_match_manual_selection(self, company, accounts, posted, filters):
        full = project_ledger(company, accounts["cash"].pk)
        filtered = project_ledger(company, accounts["cash"].pk, filters=filters)
        expected = [l for l in full.lines if filters.matches(l)]

        assert filtered.lines == expected
        assert filtered.total_debit == sum((l.debit for l in expected), Decimal("0"))
        assert filtered.total_credit == sum((l.credit for l in expected), Decimal("0"))
        assert filtered.closing_balance == expected[-1].running_balance

    def test_voucher_type_filter(self, company, accounts, voucher_types, posted):
        ledger = project_ledger(
            company, accounts["cash"].pk,
            filters=LedgerFilters(voucher_type_id=voucher_types["PAYMENT"].pk),
        )
        assert [l.voucher_type for l in ledger.lines] == ["Payment"]

    def test_filter_matching_nothing(self, company, accounts, posted):
        ledger = project_ledger(company, accounts["cash"].pk, filters=LedgerFilters(search="zzz"))
        assert ledger.lines == []
        assert ledger.closing_balance == Decimal("0.00")


@pytest.mark.django_db
class TestParticulars:
    def test_orphan_row_falls_back_to_narration(self, company, make_posted, accounts, entry):
        voucher = make_posted([entry(accounts["cash"], debit="9"), entry(accounts["bank"], credit="9")])
        sequence = next_company_sequence(company, LEDGER_SEQUENCE)
        with ledger_writes_allowed():
            LedgerTransaction.objects.create(
                company=company, voucher=voucher, account=accounts["capital"], line_no=1,
                transaction_date=date(2026, 4, 1), debit=Decimal("1"), narration="Manual import",
                sequence=sequence,
            )

        ledger = project_ledger(company, accounts["capital"].pk)

        # cash and bank are both counterparts of this row
        assert ledger.lines[0].particulars == "Multiple entries"

    def test_no_counterpart_uses_narration_or_dash(self, company, make_draft, add_account):
        lonely = add_account("7000", "Suspense")
        voucher = make_draft([])
        with ledger_writes_allowed():
            for line_no, narration in enumerate(("Opening import", ""), start=1):
                LedgerTransaction.objects.create(
                    company=company, voucher=voucher, account=lonely, line_no=line_no,
                    transaction_date=date(2026, 4, 1), credit=Decimal("1"), narration=narration,
                    sequence=next_company_sequence(company, LEDGER_SEQUENCE),
                )

        ledger = project_ledger(company, lonely.pk)

        assert [l.particulars for l in ledger.lines] == ["Opening import", "-"]

    def test_unknown_account_raises(self, company, second_company, add_account):
        foreign = add_account("1000", "Elsewhere", target_company=second_company)
        with pytest.raises(AccountNotFound):
            project_ledger(company, foreign.pk)


@pytest.mark.django_db
class TestTrialBalance:
    def test_totals_balance(self, actor, company, make_posted, accounts, entry):
        make_posted([entry(accounts["cash"], debit="5000"), entry(accounts["sales"], credit="5000")],
                    voucher_date=date(2026, 4, 1))
        make_posted([entry(accounts["rent"], debit="1200"), entry(accounts["cash"], credit="1200")],
                    voucher_date=date(2026, 4, 5))

        tb = get_trial_balance(company)

        rows = {row["code"]: row for row in tb["accounts"]}
        assert rows["1000"]["debit"] == "3800.00"
        assert rows["4000"]["credit"] == "5000.00"
        assert rows["5000"]["debit"] == "1200.00"
        assert rows["1000"]["group"] == "Cash & Bank"
        assert tb["total_debit"] == tb["total_credit"] == "5000.00"
        assert tb["is_balanced"] is True

    def test_as_of_date(self, company, make_posted, accounts, entry):
        make_posted([entry(accounts["cash"], debit="10"), entry(accounts["sales"], credit="10")],
                    voucher_date=date(2026, 4, 1))
        make_posted([entry(accounts["cash"], debit="20"), entry(accounts["sales"], credit="20")],
                    voucher_date=date(2026, 5, 1))

        tb = get_trial_balance(company, as_of=date(2026, 4, 30))

        assert tb["as_of_date"] == "2026-04-30"
        assert tb["total_debit"] == "10.00"


@pytest.mark.django_db
class TestVoucherSummaries:
    def test_two_line_tile(self, make_draft, accounts, entry):
        voucher = make_draft([entry(accounts["rent"], debit="50"), entry(accounts["cash"], credit="50")])
        tile = voucher_tile(voucher)
        assert (tile.primary, tile.secondary) == ("Rent A/c", "Cash A/c")

    def test_multi_line_tile(self, make_draft, accounts, entry):
        voucher = make_draft([
            entry(accounts["rent"], debit="30"),
            entry(accounts["capital"], debit="20"),
            entry(accounts["cash"], credit="50"),
        ])
        assert voucher_tile(voucher).primary == "Multiple entries"

    def test_one_sided_tile(self, make_draft, accounts, entry):
        assert voucher_tile(make_draft([])).primary == "No ledger entries"
        voucher = make_draft([entry(accounts["rent"], debit="30")])
        assert voucher_tile(voucher).primary == "No ledger entries"

    def test_detail_lines_and_totals(self, make_draft, accounts, entry):
        voucher = make_draft([
            entry(accounts["rent"], debit="30", narration="April"),
            entry(accounts["cash"], credit="30"),
        ])
        detail = voucher_detail(voucher)
        assert [(l["account_code"], l["account_name"]) for l in detail["lines"]] == [
            ("5000", "Rent A/c"), ("1000", "Cash A/c"),
        ]
        assert detail["lines"][0]["narration"] == "April"
        assert detail["totals"] == {"debit": "30.00", "credit": "30.00"}

    def test_list_filters_and_type_totals(self, actor, company, make_draft, make_posted, accounts, entry, voucher_types):
        make_posted([entry(accounts["cash"], debit="100"), entry(accounts["sales"], credit="100")],
                    voucher_type="RECEIPT", narration="Retainer", reference_number="INV-7")
        make_draft([], voucher_type="RECEIPT")
        make_draft([], voucher_type="PAYMENT", narration="Stationery")

        qs = company.vouchers.all()
        assert filter_vouchers(qs, search="inv-7").count() == 1
        assert filter_vouchers(qs, status="draft").count() == 2
        assert filter_vouchers(qs, voucher_type_id=voucher_types["PAYMENT"].pk).count() == 1

        totals = {row["code"]: row for row in voucher_type_totals(company)}
        assert totals["RECEIPT"]["count"] == 2
        assert totals["RECEIPT"]["total_amount"] == "100.00"
        posted_only = {row["code"]: row for row in voucher_type_totals(company, status="posted")}
        assert posted_only["RECEIPT"]["count"] == 1
        assert posted_only["PAYMENT"]["count"] == 0


def test_format_balance():
    assert format_balance(Decimal("-5000")) == "5000.00 Cr"
    assert format_balance(Decimal("0")) == "0.00 Dr"
