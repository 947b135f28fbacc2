"""
Ledger service: account balances and atomic balance-changing operations.
"""

__version__ = "1.0.0"
