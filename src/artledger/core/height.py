"""
Height oracles.

The ledger never owns the height counter. The host supplies a zero-argument
callable returning the current height, which vesting uses only for
ordering comparisons.
"""

from __future__ import annotations

from typing import Protocol


class HeightOracle(Protocol):
    def __call__(self) -> int: ...


class ManualHeightOracle:
    """
    Settable, monotonically non-decreasing height counter.

    Used by tests and the CLI in place of a real chain tip.
    """

    def __init__(self, height: int = 0) -> None:
        if height < 0:
            raise ValueError(f"height cannot be negative: {height}")
        self._height = height

    def __call__(self) -> int:
        return self._height

    @property
    def height(self) -> int:
        return self._height

    def set(self, height: int) -> int:
        """
        Move to an absolute height.

        Raises:
            ValueError: If height is below the current height
        """
        if height < self._height:
            raise ValueError(
                f"height must not decrease ({height} < {self._height})"
            )
        self._height = height
        return self._height

    def advance(self, blocks: int = 1) -> int:
        if blocks < 0:
            raise ValueError(f"cannot advance by a negative amount: {blocks}")
        self._height += blocks
        return self._height
