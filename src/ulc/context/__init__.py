"""Context packets — the compiled, immutable hand-off derived from a ledger record."""
