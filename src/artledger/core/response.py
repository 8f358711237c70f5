"""
Call results at the host boundary.

Ledger methods raise typed :class:`LedgerError` exceptions. Hosts that expect
a value-or-code result use :func:`invoke`, which maps a failure to its
numeric code.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from artledger.core.ledger_exceptions import LedgerError


@dataclass(frozen=True)
class Response:
    """Either a success ``value`` or a numeric ``error`` code."""

    value: Any = None
    error: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Any) -> "Response":
        return cls(value=value)

    @classmethod
    def failure(cls, code: int) -> "Response":
        return cls(error=int(code))

    def to_dict(self) -> Dict[str, Any]:
        if self.ok:
            return {"value": self.value}
        return {"error": self.error}


def invoke(func: Callable[..., Any], *args: Any, **kwargs: Any) -> Response:
    """
    Call a ledger operation and wrap its outcome.

    Only :class:`LedgerError` is converted. Anything else is a defect and
    propagates.
    """
    try:
        return Response.success(func(*args, **kwargs))
    except LedgerError as exc:
        return Response.failure(exc.code)
