import json
from pathlib import Path

import yaml
from click.testing import CliRunner

from artledger.cli.ledger_cli import cli

ADMIN = "ST1PQHQKV0RJXZFY1DGX8MNSNYVE3VGZJSRTPGZGM"
ALICE = "ST2CY5V39NHDP5PWE9V7FQRCL3BPG5P5GWGKR43FV"
BOB = "ST3NBRSFKX28FQ2ZJ1MAKX58HKHSDGNV5N7R21XCP"


def _run(state: Path, *args: str):
    runner = CliRunner()
    return runner.invoke(cli, ["--json-output", "--state", str(state), *args])


def _init(tmp_path: Path, height: int = 100) -> Path:
    state = tmp_path / "ledger.json"
    result = _run(state, "init", "--admin", ADMIN, "--height", str(height))
    assert result.exit_code == 0, result.output
    return state


def test_init_writes_state_file(tmp_path):
    state = _init(tmp_path)
    payload = json.loads(state.read_text())
    assert payload["height"] == 100
    assert payload["ledger"]["admin"] == ADMIN
    assert payload["ledger"]["total_supply"] == 0


def test_init_refuses_to_overwrite(tmp_path):
    state = _init(tmp_path)
    result = _run(state, "init", "--admin", ADMIN)
    assert result.exit_code != 0
    assert "already exists" in result.output


def test_init_from_genesis_file(tmp_path):
    genesis = tmp_path / "genesis.yaml"
    genesis.write_text(yaml.safe_dump({"token": {"admin": ADMIN, "name": "Gallery", "symbol": "GAL"}}))
    state = tmp_path / "ledger.json"

    result = _run(state, "init", "--genesis", str(genesis))
    assert result.exit_code == 0, result.output

    info = json.loads(_run(state, "info").output)
    assert info["name"] == "Gallery"
    assert info["symbol"] == "GAL"
    assert info["decimals"] == 6


def test_init_rejects_invalid_config(tmp_path):
    result = _run(tmp_path / "ledger.json", "init", "--admin", ADMIN, "--decimals", "40")
    assert result.exit_code != 0
    assert not (tmp_path / "ledger.json").exists()


def test_mint_and_balance(tmp_path):
    state = _init(tmp_path)
    result = _run(state, "mint", "--caller", ADMIN, ALICE, "1000")
    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["value"] is True

    balance = json.loads(_run(state, "balance", ALICE).output)
    assert balance == {"address": ALICE, "balance": 1000, "staked": 0}


def test_failed_call_reports_code_and_keeps_state(tmp_path):
    state = _init(tmp_path)
    before = state.read_text()

    result = _run(state, "mint", "--caller", ALICE, BOB, "10")

    assert result.exit_code == 1
    assert json.loads(result.output) == {"operation": "mint", "error": 100, "reason": "NOT_AUTHORIZED"}
    assert state.read_text() == before


def test_batch_mint_entries(tmp_path):
    state = _init(tmp_path)
    result = _run(
        state, "batch-mint", "--caller", ADMIN, "--entry", f"{ALICE}:500", "--entry", f"{BOB}:300"
    )
    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["value"] == 800
    assert json.loads(_run(state, "info").output)["total_supply"] == 800


def test_batch_mint_bad_entry_format(tmp_path):
    state = _init(tmp_path)
    result = _run(state, "batch-mint", "--caller", ADMIN, "--entry", "no-amount")
    assert result.exit_code == 2


def test_allowance_flow(tmp_path):
    state = _init(tmp_path)
    _run(state, "mint", "--caller", ADMIN, ALICE, "1000")
    assert _run(state, "approve", "--caller", ALICE, BOB, "100").exit_code == 0

    result = _run(state, "transfer-from", "--caller", BOB, ALICE, BOB, "40")
    assert result.exit_code == 0, result.output

    allowance = json.loads(_run(state, "allowance", ALICE, BOB).output)
    assert allowance["allowance"] == 60
    assert json.loads(_run(state, "balance", BOB).output)["balance"] == 40


def test_pause_blocks_transfer(tmp_path):
    state = _init(tmp_path)
    _run(state, "mint", "--caller", ADMIN, ALICE, "10")
    assert json.loads(_run(state, "pause", "--caller", ADMIN).output)["value"] is True

    result = _run(state, "transfer", "--caller", ALICE, BOB, "1", "--memo", "hi")
    assert result.exit_code == 1
    assert json.loads(result.output)["error"] == 104

    assert json.loads(_run(state, "unpause", "--caller", ADMIN).output)["value"] is False
    assert _run(state, "transfer", "--caller", ALICE, BOB, "1").exit_code == 0


def test_vesting_with_height_control(tmp_path):
    state = _init(tmp_path, height=100)
    assert _run(state, "set-vesting", "--caller", ADMIN, ALICE, "1000", "200").exit_code == 0

    locked = _run(state, "claim-vesting", "--caller", ALICE, "200")
    assert json.loads(locked.output)["error"] == 108

    assert json.loads(_run(state, "height", "--advance", "100").output)["height"] == 200
    claimed = _run(state, "claim-vesting", "--caller", ALICE, "200")
    assert json.loads(claimed.output)["value"] == 1000

    claims = json.loads(_run(state, "vesting", ALICE).output)
    assert claims["claims"] == {}


def test_height_cannot_go_backwards(tmp_path):
    state = _init(tmp_path, height=50)
    result = _run(state, "height", "--set", "10")
    assert result.exit_code != 0
    assert json.loads(_run(state, "height").output)["height"] == 50


def test_stake_and_unstake(tmp_path):
    state = _init(tmp_path)
    _run(state, "mint", "--caller", ADMIN, ALICE, "100")
    assert _run(state, "stake", "--caller", ALICE, "60").exit_code == 0
    assert json.loads(_run(state, "balance", ALICE).output) == {
        "address": ALICE,
        "balance": 40,
        "staked": 60,
    }
    assert json.loads(_run(state, "unstake", "--caller", ALICE, "70").output)["error"] == 102


def test_admin_commands(tmp_path):
    state = _init(tmp_path)
    assert _run(state, "update-metadata", "--caller", ADMIN, "--name", "New", "--symbol", "NEW").exit_code == 0
    assert _run(state, "transfer-admin", "--caller", ADMIN, ALICE).exit_code == 0
    info = json.loads(_run(state, "info").output)
    assert info["admin"] == ALICE
    assert info["symbol"] == "NEW"


def test_missing_state_file(tmp_path):
    result = _run(tmp_path / "absent.json", "info")
    assert result.exit_code == 1
    assert "artledger init" in result.output


def test_rich_output_without_json_flag(tmp_path):
    state = _init(tmp_path)
    result = CliRunner().invoke(cli, ["--state", str(state), "info"])
    assert result.exit_code == 0, result.output
    assert "Artist Token" in result.output


def test_malformed_ledger_maps_report_clean_error(tmp_path):
    state = _init(tmp_path)
    payload = json.loads(state.read_text())
    payload["ledger"]["balances"] = [ALICE, 10]
    state.write_text(json.dumps(payload))

    result = _run(state, "info")

    assert result.exit_code == 1
    assert "corrupted state file" in result.output
    assert not isinstance(result.exception, AttributeError)


def test_unknown_state_version_is_rejected(tmp_path):
    state = _init(tmp_path)
    payload = json.loads(state.read_text())
    assert payload["version"] == 1
    payload["version"] = 99
    state.write_text(json.dumps(payload))

    result = _run(state, "balance", ALICE)

    assert result.exit_code == 1
    assert "unsupported state file version 99" in result.output
