"""
artledger - Single-Asset Token Ledger

An in-memory accounting ledger for one fungible asset with administrator
controlled issuance, delegated spending, staking and height-locked vesting.

Main Components:
- core.contracts.artist_token: The ledger operations and queries
- core.ledger_state: Authoritative balances, allowances and vesting claims
- core.transaction: All-or-nothing call semantics
- cli: Command-line interface backed by a JSON state file
"""

__version__ = "0.1.0"
__author__ = "artledger Development Team"

__all__ = []
