"""
Static demo data for the QuickPay dashboard.

This package contains fixture rows used by DemoTables and by the invoice
store's offline fallback, for development, testing and demonstrations
without a live backend.

Modules:
- fixtures: users, clients, invoices, line items and payments rows
"""
