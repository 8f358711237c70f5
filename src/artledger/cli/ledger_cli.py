#!/usr/bin/env python3
"""
artledger - Command-line interface

Drives a ledger persisted in a JSON state file. Each mutation loads the
file, runs one ledger call and writes the file back only when the call
succeeds.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import click
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from artledger.cli.state_file import StateFileError, load_ledger, save_ledger
from artledger.core import config as ledger_config
from artledger.core.config import ConfigurationError, TokenConfig, load_token_config
from artledger.core.constants import ErrorCode
from artledger.core.contracts import ArtistToken
from artledger.core.height import ManualHeightOracle
from artledger.core.logging_config import setup_logging
from artledger.core.response import invoke

logger = logging.getLogger(__name__)

console = Console()


def _cli_fail(exc: Exception, exit_code: int = 1) -> None:
    """Centralized CLI error handler for consistent messaging."""
    logger.error("CLI error: %s", exc, exc_info=True)
    console.print(f"[bold red]Error:[/] {exc}")
    sys.exit(exit_code)


def _emit_payload(ctx: click.Context, payload: Dict[str, Any], title: str) -> None:
    """Emit a result payload honoring the global --json-output flag."""
    if ctx.obj.get("json_output"):
        click.echo(json.dumps(payload, indent=2, sort_keys=True))
        return

    table = Table(show_header=False, box=box.ROUNDED, title=title)
    for key, value in payload.items():
        rendered = json.dumps(value) if isinstance(value, (dict, list)) else str(value)
        table.add_row(f"[bold cyan]{key.replace('_', ' ').title()}[/]", rendered)
    console.print(Panel(table, border_style="cyan"))


def _load(ctx: click.Context) -> Tuple[ArtistToken, ManualHeightOracle]:
    try:
        return load_ledger(ctx.obj["state_path"])
    except StateFileError as exc:
        raise click.ClickException(str(exc)) from exc


def _execute(ctx: click.Context, operation: str, method: str, *args: Any) -> None:
    """Run one ledger call against the state file and report the outcome."""
    token, oracle = _load(ctx)
    response = invoke(getattr(token, method), *args)

    if not response.ok:
        reason = ErrorCode(response.error).name
        logger.info(
            "Ledger call rejected",
            extra={"event": "cli.call_rejected", "operation": operation, "error_code": response.error},
        )
        if ctx.obj.get("json_output"):
            click.echo(json.dumps({"operation": operation, "error": response.error, "reason": reason}))
        else:
            console.print(f"[bold red]Error {response.error}[/] ({reason}) in {operation}")
        ctx.exit(1)

    save_ledger(ctx.obj["state_path"], token, oracle)
    _emit_payload(
        ctx,
        {"operation": operation, "value": response.value, "height": oracle.height},
        title=operation,
    )


def _parse_entries(ctx: click.Context, param: click.Parameter, values: Tuple[str, ...]) -> List[Tuple[str, int]]:
    entries = []
    for raw in values:
        recipient, sep, amount = raw.rpartition(":")
        if not sep or not recipient:
            raise click.BadParameter(f"expected ADDRESS:AMOUNT, got {raw!r}")
        try:
            entries.append((recipient, int(amount)))
        except ValueError as exc:
            raise click.BadParameter(f"amount must be an integer in {raw!r}") from exc
    return entries


caller_option = click.option("--caller", required=True, help="Principal invoking the call.")


@click.group()
@click.option(
    "--state",
    "state_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=ledger_config.STATE_FILE,
    show_default=True,
    help="Ledger state file.",
)
@click.option("--json-output", is_flag=True, help="Output raw JSON")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=ledger_config.LOG_LEVEL,
    show_default=True,
    help="Log level for structured logs on stderr.",
)
@click.pass_context
def cli(ctx: click.Context, state_path: Path, json_output: bool, log_level: str):
    """
    artledger - single-asset token ledger

    Mint, transfer, delegate, stake and vest tokens in a local ledger.
    """
    ctx.ensure_object(dict)
    setup_logging(
        name="artledger",
        level=log_level,
        environment=ledger_config.ENVIRONMENT,
        log_file=ledger_config.LOG_FILE,
    )
    ctx.obj["state_path"] = state_path
    ctx.obj["json_output"] = json_output


# ============================================================================
# Setup
# ============================================================================


@cli.command("init")
@click.option("--admin", help="Administrator principal (overrides the genesis file).")
@click.option(
    "--genesis",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML genesis file with token parameters.",
)
@click.option("--name", help="Token name.")
@click.option("--symbol", help="Token symbol.")
@click.option("--decimals", type=int, help="Token decimals.")
@click.option("--uri", help="Token metadata URI.")
@click.option("--height", type=click.IntRange(min=0), default=0, show_default=True)
@click.option("--force", is_flag=True, help="Overwrite an existing state file.")
@click.pass_context
def init(
    ctx: click.Context,
    admin: Optional[str],
    genesis: Optional[Path],
    name: Optional[str],
    symbol: Optional[str],
    decimals: Optional[int],
    uri: Optional[str],
    height: int,
    force: bool,
):
    """Create a fresh ledger with zero supply."""
    path: Path = ctx.obj["state_path"]
    if path.exists() and not force:
        raise click.ClickException(f"{path} already exists (use --force to overwrite)")

    overrides = {"admin": admin, "name": name, "symbol": symbol, "decimals": decimals, "uri": uri}
    try:
        if genesis:
            token_config = load_token_config(genesis, **overrides)
        else:
            token_config = TokenConfig.from_dict({k: v for k, v in overrides.items() if v is not None})
    except ConfigurationError as exc:
        raise click.ClickException(str(exc)) from exc

    oracle = ManualHeightOracle(height)
    token = ArtistToken.from_config(token_config, oracle)
    save_ledger(path, token, oracle)
    _emit_payload(
        ctx,
        {"state_file": str(path), "admin": token.get_admin(), "symbol": token.get_symbol(), "height": height},
        title="Ledger initialized",
    )


@cli.command("height")
@click.option("--set", "set_to", type=int, help="Move to an absolute height.")
@click.option("--advance", type=click.IntRange(min=0), help="Advance by N blocks.")
@click.pass_context
def height(ctx: click.Context, set_to: Optional[int], advance: Optional[int]):
    """Show or move the ledger height."""
    token, oracle = _load(ctx)
    try:
        if set_to is not None:
            oracle.set(set_to)
        if advance is not None:
            oracle.advance(advance)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc

    if set_to is not None or advance is not None:
        save_ledger(ctx.obj["state_path"], token, oracle)
    _emit_payload(ctx, {"height": oracle.height}, title="Height")


# ============================================================================
# Administration
# ============================================================================


@cli.command("transfer-admin")
@caller_option
@click.argument("new_admin")
@click.pass_context
def transfer_admin(ctx: click.Context, caller: str, new_admin: str):
    """Hand the administrator role to NEW_ADMIN."""
    _execute(ctx, "transfer-admin", "transfer_admin", caller, new_admin)


@cli.command("pause")
@caller_option
@click.pass_context
def pause(ctx: click.Context, caller: str):
    """Pause holder operations."""
    _execute(ctx, "pause", "set_paused", caller, True)


@cli.command("unpause")
@caller_option
@click.pass_context
def unpause(ctx: click.Context, caller: str):
    """Resume holder operations."""
    _execute(ctx, "unpause", "set_paused", caller, False)


@cli.command("update-metadata")
@caller_option
@click.option("--name", required=True)
@click.option("--symbol", required=True)
@click.option("--uri", default=None)
@click.pass_context
def update_metadata(ctx: click.Context, caller: str, name: str, symbol: str, uri: Optional[str]):
    """Replace the token name, symbol and URI."""
    _execute(ctx, "update-metadata", "update_metadata", caller, name, symbol, uri)


# ============================================================================
# Supply
# ============================================================================


@cli.command("mint")
@caller_option
@click.argument("recipient")
@click.argument("amount", type=int)
@click.pass_context
def mint(ctx: click.Context, caller: str, recipient: str, amount: int):
    """Mint AMOUNT to RECIPIENT."""
    _execute(ctx, "mint", "mint", caller, recipient, amount)


@cli.command("batch-mint")
@caller_option
@click.option(
    "--entry",
    "entries",
    multiple=True,
    required=True,
    callback=_parse_entries,
    help="ADDRESS:AMOUNT, repeatable.",
)
@click.pass_context
def batch_mint(ctx: click.Context, caller: str, entries: List[Tuple[str, int]]):
    """Mint to several recipients; all entries succeed or none do."""
    _execute(ctx, "batch-mint", "batch_mint", caller, entries)


@cli.command("burn")
@caller_option
@click.argument("amount", type=int)
@click.pass_context
def burn(ctx: click.Context, caller: str, amount: int):
    """Burn AMOUNT from the caller's balance."""
    _execute(ctx, "burn", "burn", caller, amount)


# ============================================================================
# Transfers & allowances
# ============================================================================


@cli.command("transfer")
@caller_option
@click.argument("recipient")
@click.argument("amount", type=int)
@click.option("--memo", default=None, help="Opaque memo carried on the event.")
@click.pass_context
def transfer(ctx: click.Context, caller: str, recipient: str, amount: int, memo: Optional[str]):
    """Send AMOUNT to RECIPIENT."""
    _execute(ctx, "transfer", "transfer", caller, amount, recipient, memo)


@cli.command("approve")
@caller_option
@click.argument("spender")
@click.argument("amount", type=int)
@click.pass_context
def approve(ctx: click.Context, caller: str, spender: str, amount: int):
    """Set SPENDER's allowance to exactly AMOUNT."""
    _execute(ctx, "approve", "approve", caller, spender, amount)


@cli.command("increase-allowance")
@caller_option
@click.argument("spender")
@click.argument("delta", type=int)
@click.pass_context
def increase_allowance(ctx: click.Context, caller: str, spender: str, delta: int):
    """Raise SPENDER's allowance by DELTA."""
    _execute(ctx, "increase-allowance", "increase_allowance", caller, spender, delta)


@cli.command("decrease-allowance")
@caller_option
@click.argument("spender")
@click.argument("delta", type=int)
@click.pass_context
def decrease_allowance(ctx: click.Context, caller: str, spender: str, delta: int):
    """Lower SPENDER's allowance by DELTA."""
    _execute(ctx, "decrease-allowance", "decrease_allowance", caller, spender, delta)


@cli.command("transfer-from")
@caller_option
@click.argument("owner")
@click.argument("recipient")
@click.argument("amount", type=int)
@click.pass_context
def transfer_from(ctx: click.Context, caller: str, owner: str, recipient: str, amount: int):
    """Move AMOUNT from OWNER to RECIPIENT using the caller's allowance."""
    _execute(ctx, "transfer-from", "transfer_from", caller, owner, recipient, amount)


# ============================================================================
# Staking & vesting
# ============================================================================


@cli.command("stake")
@caller_option
@click.argument("amount", type=int)
@click.pass_context
def stake(ctx: click.Context, caller: str, amount: int):
    """Move AMOUNT from spendable to staked balance."""
    _execute(ctx, "stake", "stake", caller, amount)


@cli.command("unstake")
@caller_option
@click.argument("amount", type=int)
@click.pass_context
def unstake(ctx: click.Context, caller: str, amount: int):
    """Move AMOUNT from staked back to spendable balance."""
    _execute(ctx, "unstake", "unstake", caller, amount)


@cli.command("set-vesting")
@caller_option
@click.argument("recipient")
@click.argument("amount", type=int)
@click.argument("release_height", type=int)
@click.pass_context
def set_vesting(ctx: click.Context, caller: str, recipient: str, amount: int, release_height: int):
    """Mint AMOUNT to RECIPIENT with a receipt claimable at RELEASE_HEIGHT."""
    _execute(ctx, "set-vesting", "set_vesting", caller, recipient, amount, release_height)


@cli.command("claim-vesting")
@caller_option
@click.argument("release_height", type=int)
@click.pass_context
def claim_vesting(ctx: click.Context, caller: str, release_height: int):
    """Retire the caller's receipt at RELEASE_HEIGHT."""
    _execute(ctx, "claim-vesting", "claim_vesting", caller, release_height)


# ============================================================================
# Queries
# ============================================================================


@cli.command("info")
@click.pass_context
def info(ctx: click.Context):
    """Show token metadata and global counters."""
    token, oracle = _load(ctx)
    _emit_payload(
        ctx,
        {
            "name": token.get_name(),
            "symbol": token.get_symbol(),
            "decimals": token.get_decimals(),
            "uri": token.get_uri(),
            "admin": token.get_admin(),
            "paused": token.is_paused(),
            "total_supply": token.get_total_supply(),
            "max_supply": token.get_max_supply(),
            "height": oracle.height,
        },
        title="Token",
    )


@cli.command("balance")
@click.argument("address")
@click.pass_context
def balance(ctx: click.Context, address: str):
    """Show spendable and staked balance of ADDRESS."""
    token, _ = _load(ctx)
    _emit_payload(
        ctx,
        {
            "address": address,
            "balance": token.get_balance(address),
            "staked": token.get_staked_balance(address),
        },
        title="Balance",
    )


@cli.command("allowance")
@click.argument("owner")
@click.argument("spender")
@click.pass_context
def allowance(ctx: click.Context, owner: str, spender: str):
    """Show how much SPENDER may move from OWNER."""
    token, _ = _load(ctx)
    _emit_payload(
        ctx,
        {"owner": owner, "spender": spender, "allowance": token.get_allowance(owner, spender)},
        title="Allowance",
    )


@cli.command("vesting")
@click.argument("address")
@click.pass_context
def vesting(ctx: click.Context, address: str):
    """List outstanding vesting receipts of ADDRESS."""
    token, _ = _load(ctx)
    claims = {str(h): amount for h, amount in token.get_vesting_claims(address).items()}
    _emit_payload(ctx, {"address": address, "claims": claims}, title="Vesting")


# ============================================================================
# Main Entry Point
# ============================================================================


def main():
    """Main CLI entry point"""
    try:
        cli(obj={})
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/]")
        sys.exit(130)
    except (StateFileError, ConfigurationError, ValueError) as exc:
        _cli_fail(exc)


if __name__ == "__main__":
    main()
