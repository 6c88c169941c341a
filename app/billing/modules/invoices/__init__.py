"""
Invoices module.

Amounts are entered as decimal currency and stored as integer cents.
"""
