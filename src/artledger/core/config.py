"""
artledger Configuration

Process settings come from environment variables. Token deployment
parameters come from a YAML genesis file or from keyword arguments.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from artledger.core.constants import (
    BURN_ADDRESS,
    DEFAULT_TOKEN_NAME,
    DEFAULT_TOKEN_SYMBOL,
    MAX_DECIMALS,
    TOKEN_DECIMALS,
)

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


ENVIRONMENT = os.getenv("ARTLEDGER_ENVIRONMENT", "development")
LOG_LEVEL = os.getenv("ARTLEDGER_LOG_LEVEL", "WARNING").upper()
LOG_FILE = os.getenv("ARTLEDGER_LOG_FILE", "").strip() or None
STATE_FILE = os.getenv(
    "ARTLEDGER_STATE_FILE",
    os.path.join(os.getcwd(), "artledger-state.json"),
)


@dataclass
class TokenConfig:
    """Deployment parameters for a fresh ledger."""

    admin: str
    name: str = DEFAULT_TOKEN_NAME
    symbol: str = DEFAULT_TOKEN_SYMBOL
    decimals: int = TOKEN_DECIMALS
    uri: Optional[str] = None

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        if not self.admin or self.admin == BURN_ADDRESS:
            raise ConfigurationError("admin must be a valid non-null principal")
        if not self.name:
            raise ConfigurationError("token name cannot be empty")
        if not self.symbol:
            raise ConfigurationError("token symbol cannot be empty")
        if isinstance(self.decimals, bool) or not isinstance(self.decimals, int):
            raise ConfigurationError("decimals must be an integer")
        if not 0 <= self.decimals <= MAX_DECIMALS:
            raise ConfigurationError(
                f"decimals must be between 0 and {MAX_DECIMALS}, got {self.decimals}"
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TokenConfig":
        allowed = {"admin", "name", "symbol", "decimals", "uri"}
        unknown = set(data) - allowed
        if unknown:
            raise ConfigurationError(
                f"unknown token config keys: {', '.join(sorted(unknown))}"
            )
        if "admin" not in data:
            raise ConfigurationError("token config requires an admin")
        return cls(**data)


def load_token_config(path: str | Path, **overrides: Any) -> TokenConfig:
    """
    Load token parameters from a YAML genesis file.

    The file holds a mapping, optionally nested under a ``token`` key.
    Keyword overrides that are not None replace file values.

    Raises:
        ConfigurationError: If the file is missing, malformed or invalid
    """
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except FileNotFoundError as exc:
        raise ConfigurationError(f"genesis file not found: {path}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"invalid YAML in {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(f"genesis file {path} must contain a mapping")
    data = data.get("token", data)
    if not isinstance(data, dict):
        raise ConfigurationError(f"'token' section in {path} must be a mapping")

    data = dict(data)
    data.update({k: v for k, v in overrides.items() if v is not None})
    config = TokenConfig.from_dict(data)

    logger.info(
        "Token config loaded",
        extra={"event": "config.token_loaded", "path": str(path), "symbol": config.symbol},
    )
    return config
