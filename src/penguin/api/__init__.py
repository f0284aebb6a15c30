"""HTTP API for the token ledger."""
