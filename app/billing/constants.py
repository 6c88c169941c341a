"""
Central constants for the billing application.
"""
from __future__ import annotations

INVOICE_STATUSES = ("pending", "paid")

# Listing views; mutations invalidate these and redirect to them.
CUSTOMERS_PATH = "/dashboard/customers"
INVOICES_PATH = "/dashboard/invoices"

# Uploaded customer images live under this prefix of the public asset root.
CUSTOMER_ASSET_DIR = "customers"

# Permission keys seeded by scripts/init_db.py
PERMISSIONS = (
    ("customers.view", "Customers: view"),
    ("customers.create", "Customers: create"),
    ("customers.edit", "Customers: edit"),
    ("customers.delete", "Customers: delete"),
    ("invoices.view", "Invoices: view"),
    ("invoices.create", "Invoices: create"),
    ("invoices.edit", "Invoices: edit"),
    ("invoices.delete", "Invoices: delete"),
    ("reports.view", "Reports: view"),
)
