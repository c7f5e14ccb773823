from __future__ import annotations

import asyncio
import json
import sys
from typing import Any

import click
from loguru import logger

from node_staking.core.config import ConfigStore
from node_staking.core.errors import StakingPreconditionError
from node_staking.staking.facade import StakingService


def _echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, default=str))


def _service(ctx: click.Context) -> StakingService:
    obj = ctx.ensure_object(dict)
    if obj.get("service") is None:
        store = ConfigStore.load(obj.get("config_path"))
        try:
            obj["service"] = StakingService.from_config(store)
        except ValueError as exc:
            raise click.ClickException(f"Invalid wallet config: {exc}") from exc
    return obj["service"]


def _emit_outcome(outcome) -> None:
    if outcome.success:
        _echo_json({"ok": True, "result": outcome.model_dump(mode="json")})
        return
    _echo_json({"ok": False, "error": outcome.error})
    sys.exit(1)


@click.group(name="node-staking", help="Stake, unstake and claim node rewards.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to config.json (default: $NODE_STAKING_CONFIG_PATH).",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
)
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, log_level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=str(log_level).upper())
    obj = ctx.ensure_object(dict)
    obj.setdefault("config_path", config_path)


@cli.command(name="summary", help="Show stake and pending rewards across services.")
@click.pass_context
def summary_cmd(ctx: click.Context) -> None:
    try:
        summary = asyncio.run(_service(ctx).get_staking_summary())
    except StakingPreconditionError as exc:
        _echo_json({"ok": False, "error": str(exc)})
        sys.exit(1)
    _echo_json({"ok": True, "result": summary.model_dump(mode="json")})


@cli.command(name="rewards", help="List services with pending rewards.")
@click.pass_context
def rewards_cmd(ctx: click.Context) -> None:
    try:
        positions = asyncio.run(_service(ctx).get_pending_reward_positions())
    except StakingPreconditionError as exc:
        _echo_json({"ok": False, "error": str(exc)})
        sys.exit(1)
    result = [p.model_dump(mode="json") for p in positions]
    _echo_json({"ok": True, "result": result})


@cli.command(name="stake", help="Stake AMOUNT (wei) into SERVICE.")
@click.argument("service_id")
@click.argument("amount")
@click.option("--token", default=None, help="Stake token (defaults to native ETH).")
@click.pass_context
def stake_cmd(ctx: click.Context, service_id: str, amount: str, token: str | None):
    _emit_outcome(asyncio.run(_service(ctx).stake(service_id, amount, token)))


@cli.command(name="unstake", help="Unstake the full position in SERVICE.")
@click.argument("service_id")
@click.option("--amount", default=None, help="Amount in wei (validated only).")
@click.pass_context
def unstake_cmd(ctx: click.Context, service_id: str, amount: str | None):
    _emit_outcome(asyncio.run(_service(ctx).unstake(service_id, amount)))


@cli.command(name="claim", help="Claim pending rewards.")
@click.option("--service", "service_id", default=None)
@click.pass_context
def claim_cmd(ctx: click.Context, service_id: str | None):
    _emit_outcome(asyncio.run(_service(ctx).claim_rewards(service_id)))


@cli.command(name="auto-claim", help="Configure automatic reward claiming.")
@click.option("--enable/--disable", "enabled", required=True)
@click.option("--threshold", default=None, help="Minimum pending rewards in wei.")
@click.option("--interval", type=int, default=None, help="Check interval in hours.")
@click.pass_context
def auto_claim_cmd(
    ctx: click.Context, enabled: bool, threshold: str | None, interval: int | None
):
    ok, result = asyncio.run(
        _service(ctx).set_auto_claim_preference(enabled, threshold, interval)
    )
    if not ok:
        _echo_json({"ok": False, "error": result})
        sys.exit(1)
    _echo_json({"ok": True, "result": result.model_dump(mode="json")})


@cli.command(name="tx-status", help="Show whether a transaction is mined/final.")
@click.argument("tx_hash")
@click.pass_context
def tx_status_cmd(ctx: click.Context, tx_hash: str):
    try:
        tracked = asyncio.run(_service(ctx).get_transaction_status(tx_hash))
    except Exception as exc:
        _echo_json({"ok": False, "error": str(exc)})
        sys.exit(1)
    _echo_json({"ok": True, "result": tracked.model_dump(mode="json")})


def main():
    cli()


if __name__ == "__main__":
    main()
