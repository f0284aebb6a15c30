"""Penguin - fee-taxed token ledger with per-account trade limits."""

__version__ = "0.1.0"
