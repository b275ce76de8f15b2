"""
Command-line entry point for the MindTrade client.

Usage:
    mindtrade login --id-token <google-id-token>
    mindtrade trades --status open
    mindtrade history "result=loss&sortBy=profitLoss&page=2"
    mindtrade export "dateFrom=2024-03-01" --dir ~/exports
    mindtrade rules status
    mindtrade coach ask "Why might I be breaking my rules?"
    mindtrade broker status zerodha
    mindtrade config validate
"""

import argparse
import sys
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

from .analysis.behavior import behavioral_tag
from .api.broker import BrokerApi
from .api.client import ApiClient
from .api.coach import CoachApi
from .api.profile import ProfileApi
from .api.rules import RulesApi
from .api.trades import TradesApi
from .auth.service import AuthService
from .auth.token_store import TokenStore
from .config.defaults import (
    ApiParams,
    CoachParams,
    FilterParams,
    RuleParams,
    StorageParams,
)
from .config.loader import ConfigLoader
from .config.validation import ConfigValidator
from .data.models import Trade
from .errors import ClientError, DataQualityError
from .export.csv_export import export_trades_to_csv
from .logging.config import configure_logging, get_logger
from .persistence.local_store import LocalStore
from .state.filters import (
    active_filter_count,
    parse_filters,
    to_api_query,
    validate_filters,
)
from .state.presets import FilterPresetStore
from .state.rules import RulesStore
from .state.trades import TradeStore

logger = get_logger(__name__)


def _section(cls: type, values: Optional[dict[str, Any]]) -> Any:
    """Build a params dataclass from a config section, ignoring unknown keys."""
    known = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in (values or {}).items() if k in known})


@dataclass
class ClientContext:
    """Wired-up client objects for one CLI invocation."""
    config: dict[str, Any]
    store: LocalStore
    client: ApiClient
    auth: AuthService
    trades: TradesApi
    rules: RulesApi
    profile: ProfileApi
    coach: CoachApi
    broker: BrokerApi

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "ClientContext":
        storage = _section(StorageParams, config.get("storage"))
        store = LocalStore(storage.db_path)
        client = ApiClient(
            _section(ApiParams, config.get("api")),
            token_store=TokenStore(store, key=storage.token_key),
        )
        return cls(
            config=config,
            store=store,
            client=client,
            auth=AuthService(client),
            trades=TradesApi(client),
            rules=RulesApi(client),
            profile=ProfileApi(client),
            coach=CoachApi(client, _section(CoachParams, config.get("coach"))),
            broker=BrokerApi(client),
        )

    def preset_store(self) -> FilterPresetStore:
        storage = _section(StorageParams, self.config.get("storage"))
        return FilterPresetStore(
            self.store,
            key=storage.presets_key,
            config=_section(FilterParams, self.config.get("filters")),
        )


def _format_trade(trade: Trade) -> str:
    pnl = f"{trade.profit_loss:+.2f}" if trade.profit_loss is not None else "open"
    line = (
        f"{trade.trade_date} {trade.trade_time}  {trade.symbol:<12} "
        f"{trade.type.value.upper():<4} {trade.quantity:g} @ {trade.entry_price:g}  {pnl}"
    )
    tag = behavioral_tag(trade)
    return f"{line}  [{tag}]" if tag else line


def cmd_login(ctx: ClientContext, args: argparse.Namespace) -> int:
    session = ctx.auth.login_with_google(args.id_token)
    print(f"Signed in (expires {session['expires_at'] or 'unknown'})")
    return 0


def cmd_logout(ctx: ClientContext, args: argparse.Namespace) -> int:
    ctx.auth.logout()
    print("Signed out")
    return 0


def cmd_trades(ctx: ClientContext, args: argparse.Namespace) -> int:
    store = TradeStore(ctx.trades)
    store.refresh()
    if args.status == "open":
        trades = store.open_trades()
    elif args.status == "closed":
        trades = store.closed_trades()
    else:
        trades = store.trades

    for trade in trades:
        print(_format_trade(trade))
    print(f"{len(trades)} trade(s)")
    return 0


def cmd_history(ctx: ClientContext, args: argparse.Namespace) -> int:
    filters = parse_filters(args.query)
    errors = validate_filters(filters)
    if errors:
        for error in errors:
            print(f"{error.field}: {error.message}", file=sys.stderr)
        return 2

    page = ctx.trades.get_closed_trades_paginated(to_api_query(filters))
    for trade in page.trades:
        print(_format_trade(trade))
    print(
        f"Page {page.page} - {len(page.trades)} of {page.total} trade(s), "
        f"{active_filter_count(filters)} active filter(s)"
    )
    return 0


def cmd_export(ctx: ClientContext, args: argparse.Namespace) -> int:
    path = export_trades_to_csv(ctx.trades, parse_filters(args.query), args.dir)
    print(f"Exported to {path}")
    return 0


def cmd_presets(ctx: ClientContext, args: argparse.Namespace) -> int:
    presets = ctx.preset_store()

    if args.action == "save":
        preset = presets.save_preset(args.name, parse_filters(args.query))
        print(f"Saved preset {preset.name} ({preset.id})")
    elif args.action == "delete":
        presets.delete_preset(args.preset_id)
        print("Preset deleted")
    else:
        for preset in presets.presets:
            print(f"{preset.id}  {preset.name:<30} {preset.filters}")
    return 0


def cmd_rules_status(ctx: ClientContext, args: argparse.Namespace) -> int:
    trade_store = TradeStore(ctx.trades)
    trade_store.refresh()
    rules = RulesStore(
        ctx.rules, ctx.profile, trade_store,
        _section(RuleParams, ctx.config.get("rules"))
    )
    rules.load()

    by_id = {r.id: r for r in rules.rules}
    for status in rules.daily_status():
        rule = by_id[status.rule_id]
        print(
            f"{rule.type:<30} {status.status.value:<9} "
            f"current={status.current_value:g} limit={status.limit_value:g} "
            f"remaining={status.remaining_value:g}"
        )
    return 0


def cmd_coach(ctx: ClientContext, args: argparse.Namespace) -> int:
    if args.action == "ask":
        failures = []

        def on_token(text: str) -> None:
            sys.stdout.write(text)
            sys.stdout.flush()

        def on_complete(text: str) -> None:
            sys.stdout.write("\n")

        ctx.coach.ask(" ".join(args.question), on_token, on_complete, failures.append)
        for message in failures:
            print(f"Coach error: {message}", file=sys.stderr)
        return 1 if failures else 0

    if args.action == "status":
        status = ctx.coach.status()
        print(f"allowed={status.allowed} remaining={status.remaining}/{status.limit}")
    elif args.action == "history":
        for message in ctx.coach.history():
            print(f"{message.role}: {message.content}")
    elif args.action == "clear":
        ctx.coach.clear_history()
        print("Coach history cleared")
    return 0


def cmd_broker(ctx: ClientContext, args: argparse.Namespace) -> int:
    if args.action == "sync":
        result = ctx.broker.sync_positions(args.broker)
        print(
            f"matched={result.positions_matched} created={result.trades_created} "
            f"updated={result.trades_updated} closed={result.trades_closed}"
        )
        for error in result.errors:
            print(f"sync error: {error}", file=sys.stderr)
        return 0

    status = ctx.broker.status(args.broker)
    print(f"connected={status.connected} market_open={status.market_open}")
    if status.margins:
        print(f"margin available={status.margins.available:g} used={status.margins.used:g}")
    return 0


def cmd_config_validate(config: dict[str, Any]) -> int:
    errors = ConfigValidator.validate_config(config)
    if errors:
        for error in errors:
            print(f"{error.field}: {error.message} (value: {error.value})")
        return 1
    print("Configuration is valid")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mindtrade", description="MindTrade trading journal client")
    parser.add_argument("--config", type=Path, default=None, help="Path to mindtrade.yaml")
    parser.add_argument("--log-level", default=None, help="Override the configured log level")
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON")
    subparsers = parser.add_subparsers(dest="command", required=True)

    login = subparsers.add_parser("login", help="Sign in with a Google ID token")
    login.add_argument("--id-token", required=True)
    login.set_defaults(func=cmd_login)

    logout = subparsers.add_parser("logout", help="Sign out and forget the token")
    logout.set_defaults(func=cmd_logout)

    trades = subparsers.add_parser("trades", help="List trades")
    trades.add_argument("--status", choices=("all", "open", "closed"), default="all")
    trades.set_defaults(func=cmd_trades)

    history = subparsers.add_parser("history", help="Page through closed trades")
    history.add_argument("query", nargs="?", default="", help="History query string")
    history.set_defaults(func=cmd_history)

    export = subparsers.add_parser("export", help="Export filtered history to CSV")
    export.add_argument("query", nargs="?", default="", help="History query string")
    export.add_argument("--dir", default=".", help="Output directory")
    export.set_defaults(func=cmd_export)

    presets = subparsers.add_parser("presets", help="Manage saved history filters")
    preset_actions = presets.add_subparsers(dest="action", required=True)
    preset_actions.add_parser("list")
    save = preset_actions.add_parser("save")
    save.add_argument("name")
    save.add_argument("query", nargs="?", default="")
    delete = preset_actions.add_parser("delete")
    delete.add_argument("preset_id")
    presets.set_defaults(func=cmd_presets)

    rules = subparsers.add_parser("rules", help="Trading rules")
    rule_actions = rules.add_subparsers(dest="action", required=True)
    rule_actions.add_parser("status", help="Today's status of active rules")
    rules.set_defaults(func=cmd_rules_status)

    coach = subparsers.add_parser("coach", help="AI coach")
    coach_actions = coach.add_subparsers(dest="action", required=True)
    ask = coach_actions.add_parser("ask")
    ask.add_argument("question", nargs="+")
    coach_actions.add_parser("status")
    coach_actions.add_parser("history")
    coach_actions.add_parser("clear")
    coach.set_defaults(func=cmd_coach)

    broker = subparsers.add_parser("broker", help="Linked broker account")
    broker_actions = broker.add_subparsers(dest="action", required=True)
    for action in ("status", "sync"):
        sub = broker_actions.add_parser(action)
        sub.add_argument("broker", help="zerodha, angelone, upstox or iifl")
    broker.set_defaults(func=cmd_broker)

    config = subparsers.add_parser("config", help="Configuration")
    config_actions = config.add_subparsers(dest="action", required=True)
    config_actions.add_parser("validate")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    overrides: dict[str, Any] = {}
    if args.log_level:
        overrides["logging"] = {"level": args.log_level}
    if args.json_logs:
        overrides.setdefault("logging", {})["format_json"] = True

    config = ConfigLoader.create(args.config).merge_config(overrides)
    log_config = config["logging"]
    if ConfigValidator.validate_logging_params(log_config):
        log_config = {**log_config, "level": "WARNING"}
    configure_logging(
        level=log_config["level"],
        format_json=bool(log_config.get("format_json")),
    )

    if args.command == "config":
        return cmd_config_validate(config)

    try:
        ctx = ClientContext.from_config(config)
        return args.func(ctx, args)
    except (ClientError, DataQualityError, ValueError) as e:
        logger.debug("Command failed", command=args.command, error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
