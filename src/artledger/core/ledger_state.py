"""
Authoritative ledger state.

Holds every balance, staked balance, allowance and vesting claim together
with the global counters. The state is a plain container: it performs no
validation of its own. All rule enforcement happens in the operation layer
(:mod:`artledger.core.contracts.artist_token`) before a field is touched.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from artledger.core.constants import (
    DEFAULT_TOKEN_NAME,
    DEFAULT_TOKEN_SYMBOL,
    MAX_SUPPLY,
    TOKEN_DECIMALS,
)

AllowanceKey = Tuple[str, str]
VestingKey = Tuple[str, int]


@dataclass
class TokenMetadata:
    """Descriptive token fields. They have no bearing on any numeric invariant."""

    name: str = DEFAULT_TOKEN_NAME
    symbol: str = DEFAULT_TOKEN_SYMBOL
    decimals: int = TOKEN_DECIMALS
    uri: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "symbol": self.symbol,
            "decimals": self.decimals,
            "uri": self.uri,
        }


@dataclass
class LedgerState:
    """
    Mutable ledger state for a single fungible asset.

    Absent keys in any of the maps are equivalent to zero. Entries are
    materialized lazily on first credit.

    Attributes:
        admin: Principal authorized for privileged operations
        paused: Global pause flag
        total_supply: Sum of all mints minus all burns
        max_supply: Fixed supply cap
        metadata: Name, symbol, decimals and uri
        balances: Spendable balance per account
        staked: Staked balance per account
        allowances: Amount spender may move, keyed by (owner, spender)
        vesting: Vesting claim amount, keyed by (beneficiary, release height)
    """

    admin: str
    paused: bool = False
    total_supply: int = 0
    max_supply: int = MAX_SUPPLY
    metadata: TokenMetadata = field(default_factory=TokenMetadata)

    balances: Dict[str, int] = field(default_factory=dict)
    staked: Dict[str, int] = field(default_factory=dict)
    allowances: Dict[AllowanceKey, int] = field(default_factory=dict)
    vesting: Dict[VestingKey, int] = field(default_factory=dict)

    # ==================== Accessors ====================

    def balance_of(self, account: str) -> int:
        return self.balances.get(account, 0)

    def staked_of(self, account: str) -> int:
        return self.staked.get(account, 0)

    def allowance_of(self, owner: str, spender: str) -> int:
        return self.allowances.get((owner, spender), 0)

    def vesting_of(self, beneficiary: str, release_height: int) -> int:
        return self.vesting.get((beneficiary, release_height), 0)

    def credit(self, account: str, amount: int) -> None:
        self.balances[account] = self.balance_of(account) + amount

    # ==================== Snapshots ====================

    def snapshot(self) -> Dict[str, Any]:
        """
        Capture every mutable field.

        Returns:
            Opaque snapshot for :meth:`restore`
        """
        return {
            "admin": self.admin,
            "paused": self.paused,
            "total_supply": self.total_supply,
            "metadata": copy.copy(self.metadata),
            "balances": dict(self.balances),
            "staked": dict(self.staked),
            "allowances": dict(self.allowances),
            "vesting": dict(self.vesting),
        }

    def restore(self, snapshot: Dict[str, Any]) -> None:
        """Reset the state to a snapshot taken by :meth:`snapshot`."""
        self.admin = snapshot["admin"]
        self.paused = snapshot["paused"]
        self.total_supply = snapshot["total_supply"]
        self.metadata = snapshot["metadata"]
        self.balances = snapshot["balances"]
        self.staked = snapshot["staked"]
        self.allowances = snapshot["allowances"]
        self.vesting = snapshot["vesting"]

    # ==================== Serialization ====================

    def to_dict(self) -> Dict[str, Any]:
        """Serialize state to a JSON-safe dictionary."""
        allowances: Dict[str, Dict[str, int]] = {}
        for (owner, spender), amount in self.allowances.items():
            allowances.setdefault(owner, {})[spender] = amount

        vesting: Dict[str, Dict[str, int]] = {}
        for (beneficiary, height), amount in self.vesting.items():
            vesting.setdefault(beneficiary, {})[str(height)] = amount

        return {
            "admin": self.admin,
            "paused": self.paused,
            "total_supply": self.total_supply,
            "max_supply": self.max_supply,
            "metadata": self.metadata.to_dict(),
            "balances": dict(self.balances),
            "staked": dict(self.staked),
            "allowances": allowances,
            "vesting": vesting,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LedgerState":
        """Deserialize state from a dictionary produced by :meth:`to_dict`."""
        meta = data.get("metadata", {})
        state = cls(
            admin=data["admin"],
            paused=data.get("paused", False),
            total_supply=data.get("total_supply", 0),
            max_supply=data.get("max_supply", MAX_SUPPLY),
            metadata=TokenMetadata(
                name=meta.get("name", DEFAULT_TOKEN_NAME),
                symbol=meta.get("symbol", DEFAULT_TOKEN_SYMBOL),
                decimals=meta.get("decimals", TOKEN_DECIMALS),
                uri=meta.get("uri"),
            ),
        )
        state.balances = {k: int(v) for k, v in data.get("balances", {}).items()}
        state.staked = {k: int(v) for k, v in data.get("staked", {}).items()}
        state.allowances = {
            (owner, spender): int(amount)
            for owner, spenders in data.get("allowances", {}).items()
            for spender, amount in spenders.items()
        }
        state.vesting = {
            (beneficiary, int(height)): int(amount)
            for beneficiary, claims in data.get("vesting", {}).items()
            for height, amount in claims.items()
        }
        return state
