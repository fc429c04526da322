"""Key management commands."""

from __future__ import annotations

import argparse

from ...identity.scheme import Ed25519Scheme
from ..output import output_result


def register(subparsers: argparse._SubParsersAction) -> None:
    """Register the keygen command on the CLI parser."""
    keygen_parser = subparsers.add_parser("keygen", help="Generate an Ed25519 peer keypair")
    keygen_parser.add_argument("--json", action="store_true", help="Output as JSON")
    keygen_parser.set_defaults(func=cmd_keygen)


def cmd_keygen(args: argparse.Namespace) -> int:
    """Generate and print a new keypair."""
    secret, public = Ed25519Scheme.generate_keypair()
    output_result(
        {
            "scheme": Ed25519Scheme.name,
            "secret_key": secret.hex(),
            "public_key": public.hex(),
        },
        as_json=args.json,
    )
    return 0
