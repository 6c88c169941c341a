"""
Read-only reports over customers and invoices, selected by ?type=.
"""
