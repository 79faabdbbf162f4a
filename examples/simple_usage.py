"""
Walk through one purchase: publish a 1 cent offer, pay it, then poll status.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import time

from fewsats_l402 import ConfigError, L402Error, Offer, create_client


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create, pay and track a single L402 offer")
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to the .env file containing FEWSATS_* settings",
    )
    parser.add_argument("--api-key", help="API key to use instead of FEWSATS_API_KEY")
    parser.add_argument("--base-url", help="Override the API base URL")
    parser.add_argument(
        "--poll-delay",
        type=float,
        default=15.0,
        help="Seconds to wait before re-checking the payment status (default: 15)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Python logging level (default: INFO)",
    )
    return parser.parse_args()


async def run(args: argparse.Namespace) -> int:
    client = create_client(env_file=args.env_file, api_key=args.api_key, base_url=args.base_url)
    async with client:
        logging.info("=== VENDOR SIDE ===")
        offer = Offer(
            offer_id=f"simple-offer-{int(time.time() * 1000)}",
            amount=1,
            currency="USD",
            title="One Cent Offer",
            description="A simple 1 cent offer for testing",
            payment_methods=("lightning",),
        )
        bundle = await client.create_offers([offer])
        logging.info("Offer created:\n%s", bundle)

        initial = await client.get_payment_status(bundle.payment_context_token)
        logging.info("Initial status: %s", initial.status)

        logging.info("=== BUYER SIDE ===")
        payment = await client.pay_offer(offer.offer_id, bundle)
        logging.info("Payment %s is %s", payment.id, payment.status)

        record = await client.payment_info(str(payment.id))
        logging.info("Payment info: %s", record.as_client_dict())

        logging.info("=== VENDOR SIDE ===")
        logging.info("Waiting %.0f seconds for the payment to be processed...", args.poll_delay)
        await asyncio.sleep(args.poll_delay)
        final = await client.get_payment_status(bundle.payment_context_token)
        logging.info("Final status: %s", final.status)
    return 0


def main() -> int:
    args = parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )
    try:
        return asyncio.run(run(args))
    except ConfigError as exc:
        logging.error("Invalid configuration: %s", exc)
    except L402Error as exc:
        logging.error("Purchase flow failed: %s", exc)
    return 1


if __name__ == "__main__":
    sys.exit(main())
