"""
Tests for token configuration loading and structured logging setup.
"""

from __future__ import annotations

import io
import json
import logging

import pytest
import yaml

from artledger.core.config import ConfigurationError, TokenConfig, load_token_config
from artledger.core.constants import BURN_ADDRESS
from artledger.core.contracts import ArtistToken
from artledger.core.logging_config import get_logger, setup_logging


def _write_yaml(path, data):
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


class TestTokenConfig:
    def test_defaults(self, admin):
        config = TokenConfig(admin=admin)
        assert (config.name, config.symbol, config.decimals, config.uri) == (
            "Artist Token",
            "ART",
            6,
            None,
        )

    @pytest.mark.parametrize(
        "overrides",
        [
            {"admin": BURN_ADDRESS},
            {"admin": ""},
            {"name": ""},
            {"symbol": ""},
            {"decimals": 19},
            {"decimals": -1},
            {"decimals": "6"},
        ],
    )
    def test_invalid_values(self, admin, overrides):
        params = {"admin": admin, **overrides}
        with pytest.raises(ConfigurationError):
            TokenConfig(**params)

    def test_from_dict_rejects_unknown_keys(self, admin):
        with pytest.raises(ConfigurationError, match="max_supply"):
            TokenConfig.from_dict({"admin": admin, "max_supply": 5})

    def test_from_dict_requires_admin(self):
        with pytest.raises(ConfigurationError):
            TokenConfig.from_dict({"name": "X"})


class TestLoadTokenConfig:
    def test_load_nested_token_section(self, tmp_path, admin):
        path = _write_yaml(
            tmp_path / "genesis.yaml",
            {"token": {"admin": admin, "name": "Gallery", "symbol": "GAL", "uri": "ipfs://g"}},
        )
        config = load_token_config(path)
        assert config.name == "Gallery"
        assert config.symbol == "GAL"
        assert config.uri == "ipfs://g"

    def test_load_flat_mapping_with_overrides(self, tmp_path, admin, alice):
        path = _write_yaml(tmp_path / "genesis.yaml", {"admin": admin, "decimals": 2})
        config = load_token_config(path, admin=alice, name=None)
        assert config.admin == alice
        assert config.decimals == 2
        assert config.name == "Artist Token"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_token_config(tmp_path / "absent.yaml")

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("token: [unclosed", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="invalid YAML"):
            load_token_config(path)

    def test_non_mapping(self, tmp_path):
        path = _write_yaml(tmp_path / "list.yaml", ["a", "b"])
        with pytest.raises(ConfigurationError):
            load_token_config(path)

    def test_ledger_from_config(self, tmp_path, admin, oracle):
        path = _write_yaml(tmp_path / "genesis.yaml", {"admin": admin, "symbol": "GAL"})
        token = ArtistToken.from_config(load_token_config(path), oracle)
        assert token.get_symbol() == "GAL"
        assert token.get_admin() == admin
        assert token.get_total_supply() == 0


class TestLoggingSetup:
    def test_json_output_includes_extra_fields(self):
        stream = io.StringIO()
        logger = setup_logging(name="artledger", level="INFO", environment="test", stream=stream)
        logging.getLogger("artledger.core.contracts.artist_token").info(
            "Tokens minted", extra={"event": "ledger.mint", "amount": 5}
        )

        record = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert record["message"] == "Tokens minted"
        assert record["event"] == "ledger.mint"
        assert record["amount"] == 5
        assert record["environment"] == "test"
        assert record["service"] == "artledger"
        assert record["level"] == "info"
        assert "timestamp" in record
        assert logger.level == logging.INFO

    def test_setup_replaces_handlers(self):
        setup_logging(name="artledger", stream=io.StringIO())
        logger = setup_logging(name="artledger", stream=io.StringIO())
        assert len(logger.handlers) == 1

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "ledger.json"
        logger = setup_logging(
            name="artledger", log_file=str(log_file), enable_console=False
        )
        logger.warning("written to disk")
        for handler in logger.handlers:
            handler.flush()
        assert "written to disk" in log_file.read_text(encoding="utf-8")

    def test_get_logger_configures_once(self):
        first = get_logger("artledger")
        handlers = list(first.handlers)
        second = get_logger("artledger")
        assert second is first
        assert second.handlers == handlers
