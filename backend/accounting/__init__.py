"""
Accounting app - double-entry vouchers and the ledger.

This app provides:
- Account / AccountGroup: the chart of accounts
- VoucherType: numbering series (Payment, Receipt, Journal, ...)
- Voucher / VoucherEntry: draft, posted and cancelled vouchers
- LedgerTransaction: the append-only ledger written when vouchers post

Commands handle all mutations; projections read the ledger.
"""
