"""Core ledger primitives for artledger."""
