"""
All-or-nothing execution of ledger calls.

Every transaction level is a savepoint: it snapshots the ledger state and
remembers how many events were staged on entry. Any exception restores that
snapshot, drops the events staged since entry and propagates unchanged, so a
nested call (batch mint calling mint, vesting calling mint) that fails and is
caught by an enclosing block leaves nothing behind. Only a clean exit of the
outermost transaction publishes events.
"""

from __future__ import annotations

import functools
import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator, TypeVar

from artledger.core.ledger_exceptions import LedgerError

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


@contextmanager
def ledger_transaction(ledger: Any, operation: str = "call") -> Iterator[None]:
    """
    Run a block of ledger mutations atomically.

    Args:
        ledger: Object exposing ``state``, ``event_log`` and ``_txn_depth``
        operation: Name recorded in rollback logs
    """
    snapshot = ledger.state.snapshot()
    mark = ledger.event_log.mark()
    depth = ledger._txn_depth
    ledger._txn_depth = depth + 1
    try:
        yield
    except BaseException as exc:
        ledger.state.restore(snapshot)
        dropped = ledger.event_log.discard(mark)
        logger.debug(
            "Ledger transaction rolled back",
            extra={
                "event": "ledger.rollback",
                "operation": operation,
                "depth": depth,
                "error_code": int(exc.code) if isinstance(exc, LedgerError) else None,
                "dropped_events": dropped,
            },
        )
        raise
    finally:
        ledger._txn_depth = depth

    if depth == 0:
        ledger.event_log.flush()


def atomic(func: F) -> F:
    """Decorate a ledger method so each call commits fully or not at all."""

    @functools.wraps(func)
    def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
        with ledger_transaction(self, func.__name__):
            return func(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]
