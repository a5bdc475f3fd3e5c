"""
Parse or build Solana Pay transfer-request URLs from the command line.

Usage Examples:

1. Parse a native SOL request (no network access needed):
   $ python scripts/parse_url.py parse "solana:mvines9iiHiQTysrwkJjGf2gb9Ex9jXJX8ns3qwf2kN?amount=1&label=Michael"

2. Parse an SPL token request, resolving mint decimals over JSON-RPC
   (SOLANA_PAY_RPC_URL from .env, or --rpc-url):
   $ python scripts/parse_url.py parse "solana:mvines9iiHiQTysrwkJjGf2gb9Ex9jXJX8ns3qwf2kN?amount=0.01&spl-token=EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"

   With --decimals N the mint is assumed to have N decimals and no request is made.

3. Build a URL:
   $ python scripts/parse_url.py build --recipient mvines9iiHiQTysrwkJjGf2gb9Ex9jXJX8ns3qwf2kN --amount 1 --label Michael --random-reference
"""
import argparse
import asyncio
import os
import sys

# Add project root to sys.path to allow imports
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from loguru import logger

from solana_pay.core.use_cases.url.build_url import BuildPaymentUrl
from solana_pay.core.use_cases.url.parse_url import ParsePaymentUrl
from solana_pay.core.domain.value_objects import PublicKey
from solana_pay.infrastructure.services.decimals_lookup import ConstantDecimalsLookup, RpcDecimalsLookup
from solana_pay.other.loguru_tools import configure_logging


async def cmd_parse(args) -> int:
    if args.decimals is not None:
        lookup = ConstantDecimalsLookup(args.decimals)
    else:
        lookup = RpcDecimalsLookup(rpc_url=args.rpc_url)

    result = await ParsePaymentUrl(lookup).execute(args.url)
    if not result.success:
        logger.error(result.error_message)
        return 1

    payment = result.url
    print(f"recipient:  {payment.recipient}")
    print(f"amount:     {payment.amount if payment.amount is not None else '-'}")
    if result.token_amount is not None:
        print(f"base units: {result.token_amount.amount} (decimals {result.token_amount.decimals})")
    print(f"spl-token:  {payment.spl_token or '-'}")
    for reference in payment.references:
        print(f"reference:  {reference}")
    print(f"label:      {payment.label if payment.label is not None else '-'}")
    print(f"message:    {payment.message if payment.message is not None else '-'}")
    print(f"memo:       {payment.spl_memo if payment.spl_memo is not None else '-'}")
    return 0


def cmd_build(args) -> int:
    references = list(args.reference or [])
    if args.random_reference:
        references.append(PublicKey.random().to_base58())

    result = BuildPaymentUrl().execute(
        recipient=args.recipient,
        amount=args.amount,
        spl_token=args.spl_token,
        references=references,
        label=args.label,
        message=args.message,
        memo=args.memo,
    )
    if not result.success:
        logger.error(result.error_message)
        return 1

    print(result.url)
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Solana Pay URL tool")
    parser.add_argument("--log-level", default=None, help="Log level (default from settings)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    parse_parser = subparsers.add_parser("parse", help="Parse a solana: URL")
    parse_parser.add_argument("url", help="solana: URL")
    parse_parser.add_argument("--decimals", type=int, help="Assume the SPL token has this many decimals")
    parse_parser.add_argument("--rpc-url", help="JSON-RPC endpoint for mint decimals")

    build_parser = subparsers.add_parser("build", help="Build a solana: URL")
    build_parser.add_argument("--recipient", required=True, help="Base58 recipient address")
    build_parser.add_argument("--amount", help="Amount in user units, e.g. 0.01")
    build_parser.add_argument("--spl-token", help="Base58 SPL token mint")
    build_parser.add_argument("--reference", action="append", help="Base58 reference (repeatable)")
    build_parser.add_argument("--random-reference", action="store_true", help="Append a random reference")
    build_parser.add_argument("--label")
    build_parser.add_argument("--message")
    build_parser.add_argument("--memo")

    args = parser.parse_args()
    configure_logging(args.log_level)

    if args.command == "parse":
        return asyncio.run(cmd_parse(args))
    return cmd_build(args)


if __name__ == "__main__":
    sys.exit(main())
