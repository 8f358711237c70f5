"""
Test configuration and fixtures
"""
import sys
import logging
from pathlib import Path

# Add src to Python path
project_root = Path(__file__).parent.parent
src_path = project_root / "src"

sys.path.insert(0, str(src_path))

import pytest

from artledger.core.contracts import ArtistToken
from artledger.core.events import EventLog
from artledger.core.height import ManualHeightOracle
from artledger.core.ledger_state import LedgerState

ADMIN = "ST1PQHQKV0RJXZFY1DGX8MNSNYVE3VGZJSRTPGZGM"
ALICE = "ST2CY5V39NHDP5PWE9V7FQRCL3BPG5P5GWGKR43FV"
BOB = "ST3NBRSFKX28FQ2ZJ1MAKX58HKHSDGNV5N7R21XCP"
CAROL = "ST2JHG361ZXG51QTKY2NQCVBPPRRE2KZB1HR05NNC"


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo handlers and levels the CLI installs on the package logger."""
    yield
    package_logger = logging.getLogger("artledger")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture
def admin():
    return ADMIN


@pytest.fixture
def alice():
    return ALICE


@pytest.fixture
def bob():
    return BOB


@pytest.fixture
def carol():
    return CAROL


@pytest.fixture
def oracle():
    """Height oracle starting at height 100."""
    return ManualHeightOracle(100)


@pytest.fixture
def event_log():
    return EventLog()


@pytest.fixture
def token(oracle, event_log):
    """Fresh ledger administered by ADMIN."""
    return ArtistToken(LedgerState(admin=ADMIN), oracle, event_log)


@pytest.fixture
def funded_token(token):
    """Ledger where ALICE holds 1000 and BOB holds 500."""
    token.mint(ADMIN, ALICE, 1000)
    token.mint(ADMIN, BOB, 500)
    return token
