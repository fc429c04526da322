#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""
PeerGate CLI - admission tooling for peer groups.

Commands:
  peergate keygen                     Generate an Ed25519 keypair
  peergate issue --subject <pk>       Issue a certificate for a subject key
  peergate verify-cert ...            Verify a certificate signature
  peergate payload ...                Build a join payload
  peergate inspect-payload <hex>      Decode a join payload
"""

from __future__ import annotations

import argparse
import sys

from ..core.logging import configure_logging, correlation_context, get_logger
from .commands import COMMAND_MODULES

logger = get_logger(__name__)


def app() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="peergate",
        description="Admission control for distributed peer groups",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  peergate keygen                                     New keypair
  peergate issue --ca-key <sk> --subject <pk>         CA signs a peer key
  peergate verify-cert --issuer <pk> --subject <pk> --signature <sig>
  peergate payload --public-key <pk> --proof <sig>    Join payload hex
  peergate inspect-payload <hex>                      Decode a payload
        """,
    )
    parser.add_argument("--log-level", default=None, help="Override PEERGATE_LOG_LEVEL")

    subparsers = parser.add_subparsers(dest="command", required=True)
    for module in COMMAND_MODULES:
        module.register(subparsers)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = app()
    args = parser.parse_args(argv)

    configure_logging(level=args.log_level or "WARNING", json_format=False)

    handler = getattr(args, "func", None)
    if handler:
        with correlation_context():
            logger.debug("Running command %s", args.command)
            return handler(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
