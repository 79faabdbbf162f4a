"""
Command-line interface for exercising the L402 client operations.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Iterable, Sequence, Tuple

from .api import create_client
from .core.client import FewsatsClient
from .core.config import load_client_config
from .core.errors import ConfigError, L402Error
from .core.models import Offer
from .core.schema import bundle_from_wire, bundle_to_wire


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )


def _env_override(value: str) -> Tuple[str, str]:
    if "=" not in value:
        raise argparse.ArgumentTypeError("Overrides must look like KEY=VALUE")
    key, val = value.split("=", 1)
    key = key.strip()
    if not key:
        raise argparse.ArgumentTypeError("Override key must not be empty")
    return key, val


def _collect_overrides(pairs: Iterable[Tuple[str, str]]) -> dict[str, str]:
    overrides: dict[str, str] = {}
    for key, value in pairs:
        overrides[key] = value
    return overrides


def _render(result: Any) -> str:
    if isinstance(result, list):
        payload: Any = [item.as_client_dict() for item in result]
    else:
        payload = result.as_client_dict()
    return json.dumps(payload, indent=2, default=str)


async def _create_offer(client: FewsatsClient, args: argparse.Namespace) -> Any:
    offer = Offer(
        offer_id=args.offer_id,
        amount=args.amount,
        currency=args.currency,
        title=args.title,
        description=args.description,
        payment_methods=tuple(args.payment_method or ()),
    )
    bundle = await client.create_offers([offer])
    if args.save:
        Path(args.save).write_text(json.dumps(bundle_to_wire(bundle), indent=2), encoding="utf-8")
        logging.info("Bundle written to %s", args.save)
    return bundle


async def _pay_offer(client: FewsatsClient, args: argparse.Namespace) -> Any:
    raw = json.loads(Path(args.bundle_file).read_text(encoding="utf-8"))
    bundle = bundle_from_wire(raw)
    return await client.pay_offer(args.offer_id, bundle)


_COMMANDS: Dict[str, Callable[[FewsatsClient, argparse.Namespace], Awaitable[Any]]] = {
    "me": lambda client, args: client.me(),
    "balance": lambda client, args: client.balance(),
    "payment-methods": lambda client, args: client.payment_methods(),
    "create-offer": _create_offer,
    "status": lambda client, args: client.get_payment_status(args.token),
    "details": lambda client, args: client.get_payment_details(
        args.url, args.offer_id, args.method, args.token
    ),
    "pay-offer": _pay_offer,
    "payment-info": lambda client, args: client.payment_info(args.payment_id),
    "pay-lightning": lambda client, args: client.pay_lightning(
        args.invoice, args.amount, args.currency, args.description
    ),
    "set-webhook": lambda client, args: client.set_webhook(args.url),
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fewsats-l402",
        description="Publish, pay and track L402 offers",
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to the .env file containing FEWSATS_* settings (default: .env)",
    )
    parser.add_argument(
        "--set",
        action="append",
        type=_env_override,
        metavar="KEY=VALUE",
        default=None,
        help="Override an environment variable without editing the .env file",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Python logging level (default: INFO)",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("me", help="Show the account behind the API key")
    commands.add_parser("balance", help="Show wallet balances")
    commands.add_parser("payment-methods", help="List stored payment methods")

    create = commands.add_parser("create-offer", help="Publish a single offer")
    create.add_argument("--offer-id", required=True)
    create.add_argument("--amount", type=int, required=True, help="Price in minor units (cents)")
    create.add_argument("--currency", default="USD")
    create.add_argument("--title", required=True)
    create.add_argument("--description", required=True)
    create.add_argument(
        "--payment-method",
        action="append",
        help="Accepted payment method; repeat for several (default: server default)",
    )
    create.add_argument("--save", metavar="FILE", help="Write the issued bundle as JSON")

    status = commands.add_parser("status", help="Check the payment status of a context token")
    status.add_argument("token")

    details = commands.add_parser("details", help="Fetch payment instructions for an offer")
    details.add_argument("--url", required=True, help="Bundle payment request URL")
    details.add_argument("--offer-id", required=True)
    details.add_argument("--method", default="lightning")
    details.add_argument("--token", required=True, help="Payment context token")

    pay = commands.add_parser("pay-offer", help="Pay an offer from a saved bundle")
    pay.add_argument("offer_id")
    pay.add_argument("--bundle-file", required=True, help="Bundle JSON written by create-offer --save")

    info = commands.add_parser("payment-info", help="Look up an outgoing payment")
    info.add_argument("payment_id")

    lightning = commands.add_parser("pay-lightning", help="Pay a Lightning invoice directly")
    lightning.add_argument("invoice")
    lightning.add_argument("--amount", type=int, required=True)
    lightning.add_argument("--currency", default="USD")
    lightning.add_argument("--description", default="")

    webhook = commands.add_parser("set-webhook", help="Register a notification callback URL")
    webhook.add_argument("url")
    return parser


async def _execute(client: FewsatsClient, args: argparse.Namespace) -> Any:
    async with client:
        return await _COMMANDS[args.command](client, args)


def run_cli(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)
    overrides = _collect_overrides(args.set or ())

    try:
        config = load_client_config(env_file=args.env_file, overrides=overrides)
    except ConfigError as exc:
        logging.error("Invalid configuration: %s", exc)
        return 1

    client = create_client(config=config)
    try:
        result = asyncio.run(_execute(client, args))
    except (L402Error, OSError, ValueError) as exc:
        logging.error("%s failed: %s", args.command, exc)
        return 1

    print(_render(result))
    return 0


def main() -> None:
    sys.exit(run_cli())


if __name__ == "__main__":
    main()
