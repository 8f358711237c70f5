"""
artledger contracts.

- ArtistToken: single-asset ledger with capped minting, allowances,
  staking and height-gated vesting receipts
"""

from .artist_token import ArtistToken, BatchEntry

__all__ = ["ArtistToken", "BatchEntry"]
