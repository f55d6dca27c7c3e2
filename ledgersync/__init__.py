"""
Ledger sync: synchronization and verification layer of the personal
finance tracker.

Reconciles locally cached financial entities (assets, transactions,
liabilities, accounts) with their copies in the Supabase database.
"""

__version__ = "0.1.0"
