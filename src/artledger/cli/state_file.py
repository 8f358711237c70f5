"""
JSON state file used by the artledger CLI.

The file holds the serialized ledger state plus the current height. Writes
go to a temporary file in the same directory and are moved into place with
``os.replace`` so a crash never leaves a half-written file.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Tuple

from artledger.core.contracts import ArtistToken
from artledger.core.height import ManualHeightOracle
from artledger.core.ledger_state import LedgerState

logger = logging.getLogger(__name__)

STATE_FORMAT_VERSION = 1


class StateFileError(Exception):
    """Raised when the state file is missing or cannot be parsed."""
    pass


def load_ledger(path: Path) -> Tuple[ArtistToken, ManualHeightOracle]:
    """
    Load a ledger and its height oracle from ``path``.

    Raises:
        StateFileError: If the file is missing, malformed or written by an
            unsupported format version
    """
    if not path.exists():
        raise StateFileError(f"state file not found: {path} (run 'artledger init' first)")
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
        version = payload.get("version")
        if version != STATE_FORMAT_VERSION:
            raise StateFileError(
                f"unsupported state file version {version!r} in {path} (expected {STATE_FORMAT_VERSION})"
            )
        oracle = ManualHeightOracle(int(payload.get("height", 0)))
        state = LedgerState.from_dict(payload["ledger"])
    except (json.JSONDecodeError, AttributeError, KeyError, TypeError, ValueError) as exc:
        raise StateFileError(f"corrupted state file {path}: {exc}") from exc

    return ArtistToken(state, oracle), oracle


def save_ledger(path: Path, token: ArtistToken, oracle: ManualHeightOracle) -> None:
    """Atomically write the ledger and height to ``path``."""
    payload: Dict[str, Any] = {
        "version": STATE_FORMAT_VERSION,
        "height": oracle.height,
        "ledger": token.to_dict(),
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2, sort_keys=True)
        os.replace(tmp_name, path)
    except OSError:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise

    logger.debug(
        "State file written",
        extra={"event": "cli.state_saved", "path": str(path), "height": oracle.height},
    )
