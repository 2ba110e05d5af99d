"""Contract tests: vault, token ledger and seat registry on an in-memory host."""
