"""
Command-line interface for algotx.

Provides commands for creating and destroying assets, checking the status
of submitted transactions and managing signing keys.
"""

import argparse
import asyncio
import logging
import sys

import structlog

from algotx import __version__
from algotx.client import TransactionClient
from algotx.config import AlgoTxConfig, NetworkType, set_config
from algotx.core.pending import TrackingResult, TxnState
from algotx.exceptions import AlgoTxError
from algotx.node.algod import AlgodAdapter
from algotx.tx.asset_config import AssetConfigTransactionBuilder
from algotx.tx.signer import TransactionSigner, generate_test_key


def setup_logging(level: str = "INFO", json_format: bool = False) -> None:
    """Configure structured logging."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if json_format
            else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper()),
        stream=sys.stderr,
    )


def _add_node_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--network",
        choices=[n.value for n in NetworkType],
        default="testnet",
        help="Network (default: testnet)",
    )
    parser.add_argument("--algod-url", help="Custom algod base URL")
    parser.add_argument("--algod-token", default="", help="algod API token")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Output logs in JSON format",
    )


def _add_signing_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--signing-key", help="Path to a file holding the base64 private key")
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds to wait for confirmation (default: until last valid round)",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="algotx",
        description="Build, sign, submit and track ledger transactions",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Key generation
    subparsers.add_parser("keygen", help="Generate a new signing key")

    # Address derivation
    address_parser = subparsers.add_parser("address", help="Show the address of a signing key")
    address_parser.add_argument("--signing-key", required=True, help="Path to the key file")

    # Asset creation
    create_parser_ = subparsers.add_parser("asset-create", help="Create an asset")
    _add_node_arguments(create_parser_)
    _add_signing_arguments(create_parser_)
    create_parser_.add_argument("--total", type=int, required=True, help="Total base units")
    create_parser_.add_argument("--decimals", type=int, required=True, help="Decimal places (0-19)")
    create_parser_.add_argument("--unit-name", help="Unit name, at most 8 bytes")
    create_parser_.add_argument("--asset-name", help="Asset name, at most 32 bytes")
    create_parser_.add_argument("--url", help="Asset URL, at most 96 bytes")
    create_parser_.add_argument("--metadata-b64", help="Base64 32-byte metadata hash")
    create_parser_.add_argument("--default-frozen", action="store_true", help="Freeze holdings by default")
    create_parser_.add_argument("--manager", help="Manager address (default: sender)")
    create_parser_.add_argument("--reserve", help="Reserve address (default: sender)")
    create_parser_.add_argument("--freeze", help="Freeze address")
    create_parser_.add_argument("--clawback", help="Clawback address")

    # Asset destruction
    destroy_parser = subparsers.add_parser("asset-destroy", help="Destroy an asset")
    _add_node_arguments(destroy_parser)
    _add_signing_arguments(destroy_parser)
    destroy_parser.add_argument("--asset-id", type=int, required=True, help="Asset to destroy")

    # Status
    status_parser = subparsers.add_parser("status", help="Wait for a transaction to settle")
    _add_node_arguments(status_parser)
    status_parser.add_argument("txid", help="Transaction id")
    status_parser.add_argument(
        "--last-valid",
        type=int,
        default=None,
        help="Last valid round of the transaction",
    )
    status_parser.add_argument("--timeout", type=float, default=60.0, help="Seconds to wait")

    return parser


def _config_from_args(args: argparse.Namespace) -> AlgoTxConfig:
    overrides = {
        "network": NetworkType(args.network),
        "algod_url": args.algod_url,
        "algod_token": args.algod_token or None,
        "signing_key_path": getattr(args, "signing_key", None),
        "log_level": args.log_level,
        "log_json": args.log_json,
    }
    # Unset options fall back to ALGOTX_* environment variables.
    config = AlgoTxConfig(**{k: v for k, v in overrides.items() if v is not None})
    set_config(config)
    return config


def _print_result(result: TrackingResult) -> int:
    print(f"Transaction: {result.txid}")
    print(f"State: {result.state.value}")
    if result.state is TxnState.CONFIRMED:
        print(f"Confirmed round: {result.confirmed_round}")
        if result.asset_index:
            print(f"Asset id: {result.asset_index}")
        if result.application_index:
            print(f"Application id: {result.application_index}")
        return 0
    if result.reason:
        print(f"Reason: {result.reason}")
    return 1


async def send_asset_config(
    args: argparse.Namespace,
    config: AlgoTxConfig,
    signer: TransactionSigner,
    builder: AssetConfigTransactionBuilder,
) -> int:
    """Sign and send an asset configuration built from arguments."""
    node = AlgodAdapter(config)
    await node.connect()
    try:
        client = TransactionClient(node, signer, config)
        result = await client.build_and_send(builder, timeout_seconds=args.timeout)
    finally:
        await node.disconnect()

    return _print_result(result)


async def create_asset(args: argparse.Namespace) -> int:
    """Create an asset owned by the signing account."""
    config = _config_from_args(args)
    signer = TransactionSigner(config)
    signer.load_from_config()

    builder = AssetConfigTransactionBuilder()
    (
        builder.total(args.total)
        .decimals(args.decimals)
        .unit_name(args.unit_name)
        .asset_name(args.asset_name)
        .url(args.url)
        .metadata_b64(args.metadata_b64)
        .default_frozen(args.default_frozen or None)
        .freeze(args.freeze)
        .clawback(args.clawback)
    )
    builder.manager(args.manager or signer.address)
    builder.reserve(args.reserve or signer.address)
    return await send_asset_config(args, config, signer, builder)


async def destroy_asset(args: argparse.Namespace) -> int:
    """Destroy an asset managed by the signing account."""
    config = _config_from_args(args)
    signer = TransactionSigner(config)
    signer.load_from_config()

    builder = AssetConfigTransactionBuilder().asset_id(args.asset_id).destroy()
    return await send_asset_config(args, config, signer, builder)


async def wait_for_status(args: argparse.Namespace) -> int:
    """Poll a transaction until it settles."""
    config = _config_from_args(args)
    node = AlgodAdapter(config)
    await node.connect()
    try:
        client = TransactionClient(node, config=config)
        result = await client.tracker.wait(
            args.txid,
            last_valid_round=args.last_valid,
            timeout_seconds=args.timeout,
        )
    finally:
        await node.disconnect()

    return _print_result(result)


def generate_key() -> int:
    """Print a new address and its private key."""
    signer = generate_test_key()
    print(f"Address: {signer.address_str}")
    print(f"Private key (base64): {signer.export_private_key()}")
    print()
    print("Store the private key safely; it is not saved anywhere.")
    return 0


def show_address(args: argparse.Namespace) -> int:
    signer = TransactionSigner(AlgoTxConfig())
    signer.load_key_from_file(args.signing_key)
    print(signer.address_str)
    return 0


def main() -> None:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    # Setup logging
    log_level = getattr(args, "log_level", "INFO")
    log_json = getattr(args, "log_json", False)
    setup_logging(log_level, log_json)

    try:
        if args.command == "keygen":
            code = generate_key()
        elif args.command == "address":
            code = show_address(args)
        elif args.command == "asset-create":
            code = asyncio.run(create_asset(args))
        elif args.command == "asset-destroy":
            code = asyncio.run(destroy_asset(args))
        else:
            code = asyncio.run(wait_for_status(args))
    except AlgoTxError as e:
        print(f"Error: {e}", file=sys.stderr)
        code = 1

    sys.exit(code)


if __name__ == "__main__":
    main()
