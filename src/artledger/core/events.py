"""
Ledger event records and fan-out.

Events are staged while a ledger transaction is open and published only when
it commits, so observers never see effects of a rolled-back call. Delivery is
fire-and-forget: a subscriber that raises is logged and skipped.
"""

from __future__ import annotations

import logging
import time
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

EVENT_MINT = "mint"
EVENT_BATCH_MINT = "batch-mint"
EVENT_BURN = "burn"
EVENT_TRANSFER = "transfer"
EVENT_APPROVAL = "approval"
EVENT_STAKE = "stake"
EVENT_UNSTAKE = "unstake"
EVENT_VESTING_SET = "vesting-set"
EVENT_VESTING_CLAIMED = "vesting-claimed"
EVENT_ADMIN_TRANSFERRED = "admin-transferred"
EVENT_PAUSED = "paused"
EVENT_METADATA_UPDATED = "metadata-updated"


@dataclass
class LedgerEvent:
    """Represents a ledger event."""

    event_type: str
    sender: Optional[str] = None
    recipient: Optional[str] = None
    amount: Optional[int] = None
    memo: Optional[str] = None
    height: int = 0
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


Subscriber = Callable[[LedgerEvent], None]


class EventLog:
    """
    Published event history plus a staging buffer for the open transaction.

    Subscribers are called synchronously on publish, in registration order.
    """

    def __init__(self) -> None:
        self.events: List[LedgerEvent] = []
        self._pending: List[LedgerEvent] = []
        self._subscribers: List[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> None:
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def stage(self, event: LedgerEvent) -> None:
        self._pending.append(event)

    @property
    def pending(self) -> List[LedgerEvent]:
        return list(self._pending)

    def mark(self) -> int:
        """Position in the staging buffer, for a later ``discard``."""
        return len(self._pending)

    def discard(self, mark: int = 0) -> int:
        """Drop events staged after ``mark``. Returns how many were dropped."""
        dropped = len(self._pending) - mark
        del self._pending[mark:]
        return dropped

    def flush(self) -> None:
        """Publish staged events to the history and every subscriber."""
        pending, self._pending = self._pending, []
        for event in pending:
            self.events.append(event)
            for callback in list(self._subscribers):
                try:
                    callback(event)
                except Exception as exc:  # emission must not alter the call outcome
                    logger.warning(
                        "Event subscriber failed: %s",
                        exc,
                        exc_info=True,
                        extra={
                            "event": "ledger.event_subscriber_failed",
                            "event_type": event.event_type,
                        },
                    )

    def of_type(self, event_type: str) -> List[LedgerEvent]:
        return [e for e in self.events if e.event_type == event_type]
