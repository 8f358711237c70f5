"""
Artist Token ledger.

Single-asset ledger with:
- Administrator-controlled minting (single and batched) under a fixed cap
- Burning by holders
- Transfers with an opaque memo
- Allowances (approve, increase, decrease) and delegated transfers
- Staking as a pure partition of the holder's balance
- Height-gated vesting receipts

Every mutating method runs inside a ledger transaction: all guards are
checked before the first write, and any failure, including one raised by a
nested mint, restores the state from before the call.

Vesting note: ``set_vesting`` credits the minted amount as spendable balance
immediately. ``claim_vesting`` only retires the receipt once the release
height is reached and reports its amount. It moves no funds, so vested
tokens can be spent before they are claimed. This matches the deployed
behavior and is kept for compatibility.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional, Sequence, Tuple

from artledger.core.config import TokenConfig
from artledger.core.constants import MAX_BATCH_SIZE, UINT128_MAX
from artledger.core.events import (
    EVENT_ADMIN_TRANSFERRED,
    EVENT_APPROVAL,
    EVENT_BATCH_MINT,
    EVENT_BURN,
    EVENT_METADATA_UPDATED,
    EVENT_MINT,
    EVENT_PAUSED,
    EVENT_STAKE,
    EVENT_TRANSFER,
    EVENT_UNSTAKE,
    EVENT_VESTING_CLAIMED,
    EVENT_VESTING_SET,
    EventLog,
    LedgerEvent,
)
from artledger.core.guards import (
    require_admin,
    require_amount_positive,
    require_not_paused,
    require_uint,
    require_valid_address,
)
from artledger.core.height import HeightOracle, ManualHeightOracle
from artledger.core.ledger_exceptions import (
    AllowanceInsufficientError,
    AlreadyVestedError,
    BatchTooLargeError,
    InsufficientBalanceError,
    InsufficientStakeError,
    InvalidAmountError,
    InvalidReleaseHeightError,
    MaxSupplyReachedError,
    VestingLockedError,
    VestingNotFoundError,
)
from artledger.core.ledger_state import LedgerState, TokenMetadata
from artledger.core.transaction import atomic

logger = logging.getLogger(__name__)

BatchEntry = Tuple[str, int]


class ArtistToken:
    """
    Ledger operations and queries over a :class:`LedgerState`.

    Args:
        state: Ledger state to operate on
        height_oracle: Zero-argument callable returning the current height
        event_log: Sink for committed events (a fresh one by default)
    """

    def __init__(
        self,
        state: LedgerState,
        height_oracle: Optional[HeightOracle] = None,
        event_log: Optional[EventLog] = None,
    ) -> None:
        self.state = state
        self.height_oracle = height_oracle or ManualHeightOracle()
        self.event_log = event_log or EventLog()
        self._txn_depth = 0

    @classmethod
    def from_config(
        cls,
        config: TokenConfig,
        height_oracle: Optional[HeightOracle] = None,
        event_log: Optional[EventLog] = None,
    ) -> "ArtistToken":
        """Create a ledger with zero supply from deployment parameters."""
        state = LedgerState(
            admin=config.admin,
            metadata=TokenMetadata(
                name=config.name,
                symbol=config.symbol,
                decimals=config.decimals,
                uri=config.uri,
            ),
        )
        logger.info(
            "Ledger created",
            extra={
                "event": "ledger.created",
                "symbol": config.symbol,
                "admin": config.admin[:10],
            },
        )
        return cls(state, height_oracle, event_log)

    # ==================== Administrative ====================

    @atomic
    def transfer_admin(self, caller: str, new_admin: str) -> bool:
        require_admin(self.state, caller)
        require_valid_address(new_admin, "new admin")

        self.state.admin = new_admin
        self._emit(EVENT_ADMIN_TRANSFERRED, sender=caller, recipient=new_admin)
        logger.info(
            "Administrator transferred",
            extra={"event": "ledger.admin_transferred", "to": new_admin[:10]},
        )
        return True

    @atomic
    def set_paused(self, caller: str, paused: bool) -> bool:
        """Set the pause flag. Never gated by pause itself, so unpausing always works."""
        require_admin(self.state, caller)

        self.state.paused = bool(paused)
        self._emit(EVENT_PAUSED, sender=caller, data={"paused": self.state.paused})
        logger.info(
            "Pause flag updated",
            extra={"event": "ledger.paused", "paused": self.state.paused},
        )
        return self.state.paused

    @atomic
    def update_metadata(
        self, caller: str, name: str, symbol: str, uri: Optional[str] = None
    ) -> bool:
        require_admin(self.state, caller)

        self.state.metadata = TokenMetadata(
            name=name,
            symbol=symbol,
            decimals=self.state.metadata.decimals,
            uri=uri,
        )
        self._emit(
            EVENT_METADATA_UPDATED,
            sender=caller,
            data={"name": name, "symbol": symbol, "uri": uri},
        )
        return True

    # ==================== Supply ====================

    @atomic
    def mint(self, caller: str, recipient: str, amount: int) -> bool:
        """
        Mint new tokens (admin only, allowed while paused).

        Raises:
            NotAuthorizedError: Caller is not the administrator
            ZeroAddressError: Recipient is the null address
            InvalidAmountError: Amount is not positive
            MaxSupplyReachedError: Supply would exceed the cap
        """
        require_admin(self.state, caller)
        require_valid_address(recipient, "recipient")
        require_amount_positive(amount)

        new_supply = self.state.total_supply + amount
        if new_supply > self.state.max_supply:
            raise MaxSupplyReachedError(
                f"mint would exceed max supply ({new_supply} > {self.state.max_supply})",
                details={"amount": amount, "total_supply": self.state.total_supply},
            )

        self.state.credit(recipient, amount)
        self.state.total_supply = new_supply

        self._emit(EVENT_MINT, sender=caller, recipient=recipient, amount=amount)
        logger.info(
            "Tokens minted",
            extra={
                "event": "ledger.mint",
                "to": recipient[:10],
                "amount": amount,
                "new_supply": new_supply,
            },
        )
        return True

    @atomic
    def batch_mint(
        self, caller: str, entries: Sequence[BatchEntry | Mapping[str, Any]]
    ) -> int:
        """
        Mint to several recipients in order.

        The whole batch fails with the first failing entry's error and none
        of the earlier entries stay applied.

        Args:
            caller: Must be the administrator
            entries: ``(recipient, amount)`` pairs or ``{"to", "amount"}`` mappings

        Returns:
            Total amount minted
        """
        entries = list(entries)
        if len(entries) > MAX_BATCH_SIZE:
            raise BatchTooLargeError(
                f"batch holds {len(entries)} entries, limit is {MAX_BATCH_SIZE}",
                details={"size": len(entries), "limit": MAX_BATCH_SIZE},
            )
        require_admin(self.state, caller)

        total_minted = 0
        for recipient, amount in self._normalize_entries(entries):
            self.mint(caller, recipient, amount)
            total_minted += amount

        self._emit(
            EVENT_BATCH_MINT,
            sender=caller,
            amount=total_minted,
            data={"entries": len(entries)},
        )
        logger.info(
            "Batch mint completed",
            extra={
                "event": "ledger.batch_mint",
                "entries": len(entries),
                "amount": total_minted,
                "new_supply": self.state.total_supply,
            },
        )
        return total_minted

    @atomic
    def burn(self, caller: str, amount: int) -> bool:
        require_not_paused(self.state)
        require_amount_positive(amount)

        balance = self.state.balance_of(caller)
        if balance < amount:
            raise InsufficientBalanceError(
                f"burn amount exceeds balance ({amount} > {balance})",
                details={"account": caller, "balance": balance, "amount": amount},
            )

        self.state.balances[caller] = balance - amount
        self.state.total_supply -= amount

        self._emit(EVENT_BURN, sender=caller, amount=amount)
        logger.info(
            "Tokens burned",
            extra={
                "event": "ledger.burn",
                "from": caller[:10],
                "amount": amount,
                "new_supply": self.state.total_supply,
            },
        )
        return True

    # ==================== Transfers ====================

    @atomic
    def transfer(
        self, caller: str, amount: int, recipient: str, memo: Optional[str] = None
    ) -> bool:
        """Move tokens from caller to recipient. ``memo`` only rides on the event."""
        require_not_paused(self.state)
        require_valid_address(recipient, "recipient")
        require_amount_positive(amount)

        balance = self.state.balance_of(caller)
        if balance < amount:
            raise InsufficientBalanceError(
                f"transfer amount exceeds balance ({amount} > {balance})",
                details={"account": caller, "balance": balance, "amount": amount},
            )

        self.state.balances[caller] = balance - amount
        self.state.credit(recipient, amount)

        self._emit(
            EVENT_TRANSFER, sender=caller, recipient=recipient, amount=amount, memo=memo
        )
        logger.debug(
            "Tokens transferred",
            extra={
                "event": "ledger.transfer",
                "from": caller[:10],
                "to": recipient[:10],
                "amount": amount,
            },
        )
        return True

    @atomic
    def approve(self, caller: str, spender: str, amount: int) -> bool:
        """Set the caller-to-spender allowance to exactly ``amount`` (zero allowed)."""
        require_not_paused(self.state)
        require_valid_address(spender, "spender")
        require_uint(amount)

        self._set_allowance(caller, spender, amount)
        return True

    @atomic
    def increase_allowance(self, caller: str, spender: str, delta: int) -> bool:
        require_not_paused(self.state)
        require_valid_address(spender, "spender")
        require_uint(delta, "delta")

        new_allowance = self.state.allowance_of(caller, spender) + delta
        if new_allowance > UINT128_MAX:
            raise InvalidAmountError(
                "allowance would exceed the unsigned range",
                details={"owner": caller, "spender": spender, "delta": delta},
            )

        self._set_allowance(caller, spender, new_allowance)
        return True

    @atomic
    def decrease_allowance(self, caller: str, spender: str, delta: int) -> bool:
        require_not_paused(self.state)
        require_valid_address(spender, "spender")
        require_uint(delta, "delta")

        current = self.state.allowance_of(caller, spender)
        if current < delta:
            raise AllowanceInsufficientError(
                f"decreased allowance below zero ({current} < {delta})",
                details={"owner": caller, "spender": spender, "allowance": current},
            )

        self._set_allowance(caller, spender, current - delta)
        return True

    @atomic
    def transfer_from(self, caller: str, owner: str, recipient: str, amount: int) -> bool:
        """
        Move ``amount`` from owner to recipient using owner's allowance to caller.

        Raises:
            AllowanceInsufficientError: Allowance is below amount
            InsufficientBalanceError: Owner balance is below amount
        """
        require_not_paused(self.state)
        require_valid_address(recipient, "recipient")
        require_amount_positive(amount)

        current_allowance = self.state.allowance_of(owner, caller)
        if current_allowance < amount:
            raise AllowanceInsufficientError(
                f"insufficient allowance ({current_allowance} < {amount})",
                details={"owner": owner, "spender": caller, "allowance": current_allowance},
            )

        owner_balance = self.state.balance_of(owner)
        if owner_balance < amount:
            raise InsufficientBalanceError(
                f"transfer amount exceeds balance ({amount} > {owner_balance})",
                details={"account": owner, "balance": owner_balance, "amount": amount},
            )

        self.state.allowances[(owner, caller)] = current_allowance - amount
        self.state.balances[owner] = owner_balance - amount
        self.state.credit(recipient, amount)

        self._emit(
            EVENT_TRANSFER,
            sender=owner,
            recipient=recipient,
            amount=amount,
            data={"spender": caller},
        )
        logger.debug(
            "Delegated transfer",
            extra={
                "event": "ledger.transfer_from",
                "spender": caller[:10],
                "from": owner[:10],
                "to": recipient[:10],
                "amount": amount,
            },
        )
        return True

    # ==================== Staking ====================

    @atomic
    def stake(self, caller: str, amount: int) -> bool:
        require_not_paused(self.state)
        require_amount_positive(amount)

        balance = self.state.balance_of(caller)
        if balance < amount:
            raise InsufficientBalanceError(
                f"stake amount exceeds balance ({amount} > {balance})",
                details={"account": caller, "balance": balance, "amount": amount},
            )

        self.state.balances[caller] = balance - amount
        self.state.staked[caller] = self.state.staked_of(caller) + amount

        self._emit(EVENT_STAKE, sender=caller, amount=amount)
        logger.debug(
            "Tokens staked",
            extra={"event": "ledger.stake", "account": caller[:10], "amount": amount},
        )
        return True

    @atomic
    def unstake(self, caller: str, amount: int) -> bool:
        require_not_paused(self.state)
        require_amount_positive(amount)

        staked = self.state.staked_of(caller)
        if staked < amount:
            raise InsufficientStakeError(
                f"unstake amount exceeds stake ({amount} > {staked})",
                details={"account": caller, "staked": staked, "amount": amount},
            )

        self.state.staked[caller] = staked - amount
        self.state.credit(caller, amount)

        self._emit(EVENT_UNSTAKE, sender=caller, amount=amount)
        logger.debug(
            "Tokens unstaked",
            extra={"event": "ledger.unstake", "account": caller[:10], "amount": amount},
        )
        return True

    # ==================== Vesting ====================

    @atomic
    def set_vesting(
        self, caller: str, recipient: str, amount: int, release_height: int
    ) -> bool:
        """
        Mint ``amount`` to recipient now and record a receipt claimable at
        ``release_height``.

        Raises:
            InvalidReleaseHeightError: Release height is not above the current height
            AlreadyVestedError: A receipt already exists for recipient at that height
        """
        require_admin(self.state, caller)
        require_valid_address(recipient, "recipient")
        require_amount_positive(amount)

        current_height = self.height_oracle()
        if isinstance(release_height, bool) or not isinstance(release_height, int):
            raise InvalidReleaseHeightError(
                "release height must be an integer",
                details={"release_height": release_height},
            )
        if release_height <= current_height:
            raise InvalidReleaseHeightError(
                f"release height must be above current height "
                f"({release_height} <= {current_height})",
                details={"release_height": release_height, "height": current_height},
            )

        key = (recipient, release_height)
        if key in self.state.vesting:
            raise AlreadyVestedError(
                f"vesting already set for {recipient} at height {release_height}",
                details={"recipient": recipient, "release_height": release_height},
            )

        self.mint(caller, recipient, amount)
        self.state.vesting[key] = amount

        self._emit(
            EVENT_VESTING_SET,
            sender=caller,
            recipient=recipient,
            amount=amount,
            data={"release_height": release_height},
        )
        logger.info(
            "Vesting receipt recorded",
            extra={
                "event": "ledger.vesting_set",
                "to": recipient[:10],
                "amount": amount,
                "release_height": release_height,
            },
        )
        return True

    @atomic
    def claim_vesting(self, caller: str, release_height: int) -> int:
        """
        Retire caller's receipt at ``release_height`` once it is unlocked.

        Returns:
            Amount recorded on the receipt. No balance moves.

        Raises:
            VestingNotFoundError: No receipt exists at the key
            VestingLockedError: Current height is below release height
        """
        require_not_paused(self.state)

        key = (caller, release_height)
        amount = self.state.vesting.get(key, 0)
        if amount <= 0:
            raise VestingNotFoundError(
                f"no vesting claim for {caller} at height {release_height}",
                details={"account": caller, "release_height": release_height},
            )

        current_height = self.height_oracle()
        if current_height < release_height:
            raise VestingLockedError(
                f"vesting locked until height {release_height} (current {current_height})",
                details={"release_height": release_height, "height": current_height},
            )

        del self.state.vesting[key]

        self._emit(
            EVENT_VESTING_CLAIMED,
            sender=caller,
            amount=amount,
            data={"release_height": release_height},
        )
        logger.info(
            "Vesting receipt claimed",
            extra={
                "event": "ledger.vesting_claimed",
                "account": caller[:10],
                "amount": amount,
                "release_height": release_height,
            },
        )
        return amount

    # ==================== Queries ====================

    def get_balance(self, account: str) -> int:
        return self.state.balance_of(account)

    def get_staked_balance(self, account: str) -> int:
        return self.state.staked_of(account)

    def get_total_supply(self) -> int:
        return self.state.total_supply

    def get_max_supply(self) -> int:
        return self.state.max_supply

    def get_name(self) -> str:
        return self.state.metadata.name

    def get_symbol(self) -> str:
        return self.state.metadata.symbol

    def get_decimals(self) -> int:
        return self.state.metadata.decimals

    def get_uri(self) -> Optional[str]:
        return self.state.metadata.uri

    def get_allowance(self, owner: str, spender: str) -> int:
        return self.state.allowance_of(owner, spender)

    def get_vesting_amount(self, account: str, release_height: int) -> int:
        return self.state.vesting_of(account, release_height)

    def get_vesting_claims(self, account: str) -> dict[int, int]:
        """Outstanding receipts for an account, keyed by release height."""
        return {
            height: amount
            for (beneficiary, height), amount in sorted(self.state.vesting.items())
            if beneficiary == account
        }

    def get_admin(self) -> str:
        return self.state.admin

    def is_paused(self) -> bool:
        return self.state.paused

    def get_height(self) -> int:
        return self.height_oracle()

    # ==================== Helpers ====================

    def _set_allowance(self, owner: str, spender: str, amount: int) -> None:
        self.state.allowances[(owner, spender)] = amount
        self._emit(EVENT_APPROVAL, sender=owner, recipient=spender, amount=amount)
        logger.debug(
            "Allowance set",
            extra={
                "event": "ledger.approval",
                "owner": owner[:10],
                "spender": spender[:10],
                "amount": amount,
            },
        )

    @staticmethod
    def _normalize_entries(entries: Iterable[Any]) -> list[BatchEntry]:
        normalized = []
        for index, entry in enumerate(entries):
            if isinstance(entry, Mapping):
                recipient, amount = entry.get("to"), entry.get("amount")
            elif isinstance(entry, (tuple, list)) and len(entry) == 2:
                recipient, amount = entry
            else:
                raise InvalidAmountError(
                    f"batch entry {index} is not a (recipient, amount) pair",
                    details={"index": index},
                )
            normalized.append((recipient, amount))
        return normalized

    def _emit(
        self,
        event_type: str,
        sender: Optional[str] = None,
        recipient: Optional[str] = None,
        amount: Optional[int] = None,
        memo: Optional[str] = None,
        data: Optional[dict[str, Any]] = None,
    ) -> None:
        self.event_log.stage(
            LedgerEvent(
                event_type=event_type,
                sender=sender,
                recipient=recipient,
                amount=amount,
                memo=memo,
                height=self.height_oracle(),
                data=data or {},
            )
        )

    def to_dict(self) -> dict[str, Any]:
        return self.state.to_dict()


__all__ = ["ArtistToken", "BatchEntry"]
