"""Command-line interface for inspecting Switchboard accounts on Aptos."""
from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import sys
from typing import Any

from .chains.aptos import AptosClient
from .config import AppConfig, load_config
from .logging_setup import configure_logging
from .models import Event, EventHandle
from .services import EventPoller
from .switchboard import Aggregator, Job, State, load_balance


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="oracle-client",
        description="Switchboard oracle client for Aptos",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root, if any)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    state_parser = sub.add_parser("state", help="Show a State resource")
    state_parser.add_argument("address")

    job_parser = sub.add_parser("job", help="Decode a Job resource")
    job_parser.add_argument("address")

    agg_parser = sub.add_parser("aggregator-jobs", help="Decode all jobs of an aggregator")
    agg_parser.add_argument("address")

    balance_parser = sub.add_parser("balance", help="Show native coin balance")
    balance_parser.add_argument("address")

    watch_parser = sub.add_parser("watch", help="Stream new events from an event handle")
    watch_parser.add_argument("owner")
    watch_parser.add_argument("struct", help="e.g. 0x...::Switchboard::State")
    watch_parser.add_argument("field", help="e.g. aggregator_open_round_events")
    watch_parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Poll interval in seconds (overrides config)",
    )

    return parser


def _to_json(value: Any) -> str:
    def default(obj: Any) -> Any:
        if dataclasses.is_dataclass(obj):
            return {type(obj).__name__: dataclasses.asdict(obj)}
        if isinstance(obj, bytes):
            return obj.hex()
        return str(obj)

    return json.dumps(value, indent=2, default=default)


async def _watch(client: AptosClient, config: AppConfig, args: argparse.Namespace) -> None:
    def on_event(event: Event) -> None:
        print(_to_json({"sequence_number": event.sequence_number, "data": event.data}))

    poller = EventPoller(
        client,
        EventHandle(owner=args.owner, struct=args.struct, field=args.field),
        on_event,
        poll_interval=args.interval or config.events.poll_interval_seconds,
    )
    await poller.start()
    try:
        await asyncio.Event().wait()
    finally:
        await poller.stop()


async def _run(args: argparse.Namespace) -> None:
    """Execute the selected command."""
    configure_logging(args.log_level)
    config = load_config(args.config)
    client = AptosClient(
        config.chain, poll_interval=config.transactions.confirmation_poll_interval
    )

    if args.command == "state":
        print(_to_json(await State(client, args.address, config.program).load_data()))
    elif args.command == "job":
        print(_to_json(await Job(client, args.address, config.program).load_job()))
    elif args.command == "aggregator-jobs":
        aggregator = Aggregator(client, args.address, config.program)
        print(_to_json(await aggregator.load_jobs()))
    elif args.command == "balance":
        print(await load_balance(client, args.address))
    elif args.command == "watch":
        await _watch(client, config, args)
    else:
        build_parser().print_help()
        sys.exit(1)


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        asyncio.run(_run(args))
    except KeyboardInterrupt:
        pass
