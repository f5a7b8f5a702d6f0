"""Command line entry point.

Read-only access to the gateway: list connected networks, list the tokens
of a network and estimate a transfer. Signing needs a browser wallet and
is not available here.

Usage:
    crossbridge networks
    crossbridge tokens 1
    crossbridge estimate 1 0 0 0.5
"""

import argparse
import asyncio
import logging
import sys

from crossbridge.api.base import APIError
from crossbridge.api.networks import NetworksClient
from crossbridge.api.transfers import TransfersClient
from crossbridge.config import get_settings
from crossbridge.networks.service import DirectoryError, NetworksService
from crossbridge.session import SessionState
from crossbridge.transfers.errors import TransferValidationError
from crossbridge.transfers.orchestrator import TransferOrchestrator
from crossbridge.transfers.service import TransfersService

logger = logging.getLogger(__name__)


def _build_services(settings):
    networks = NetworksService(NetworksClient(settings=settings))
    transfers = TransfersService(TransfersClient(settings=settings))
    return networks, transfers


async def cmd_networks(networks: NetworksService) -> None:
    for network in await networks.connected():
        testnet = " (testnet)" if network.is_testnet else ""
        print(f"{network.id:>4}  {network.name:<16} {network.type.value}{testnet}")


async def cmd_tokens(networks: NetworksService, network_id: int) -> None:
    for token in await networks.supported_tokens(network_id):
        print(f"{token.id:>4}  {token.short_name:<8} {token.long_name}")
        for wrap in token.wraps:
            print(f"        network {wrap.network_id}: {wrap.smart_contract_address}")


async def cmd_estimate(
    orchestrator: TransferOrchestrator,
    sender_id: int,
    recipient_id: int,
    token_id: int,
    amount: str,
) -> None:
    sender, recipient = await orchestrator.select_networks(sender_id, recipient_id)
    estimate = await orchestrator.estimate(sender, recipient, token_id, amount)
    print(f"Transfer:        {amount} {sender.name} -> {recipient.name}")
    print(f"Fee:             {estimate.fee} ({estimate.fee_percentage}%)")
    print(f"Confirmation:    ~{estimate.estimated_confirmation_time}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="crossbridge", description="Cross-chain bridge client")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("networks", help="List connected networks")

    tokens = subparsers.add_parser("tokens", help="List tokens supported on a network")
    tokens.add_argument("network_id", type=int, help="Network id")

    estimate = subparsers.add_parser("estimate", help="Estimate fee and confirmation time")
    estimate.add_argument("sender_id", type=int, help="Sender network id")
    estimate.add_argument("recipient_id", type=int, help="Recipient network id")
    estimate.add_argument("token_id", type=int, help="Token id")
    estimate.add_argument("amount", help="Amount as a decimal string")

    return parser


async def run(args: argparse.Namespace) -> int:
    settings = get_settings()
    networks, transfers = _build_services(settings)

    try:
        if args.command == "networks":
            await cmd_networks(networks)
        elif args.command == "tokens":
            await cmd_tokens(networks, args.network_id)
        elif args.command == "estimate":
            orchestrator = TransferOrchestrator(
                None, networks, transfers, SessionState(), page_size=settings.history_page_size
            )
            await cmd_estimate(orchestrator, args.sender_id, args.recipient_id, args.token_id, args.amount)
    except TransferValidationError as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return 2
    except (APIError, DirectoryError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


def main():
    """Main entry point."""
    settings = get_settings()
    log_level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.debug(f"Settings: {settings.get_safe_dict()}")

    args = build_parser().parse_args()
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
