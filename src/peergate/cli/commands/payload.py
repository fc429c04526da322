"""Join payload commands: build and inspect."""

from __future__ import annotations

import argparse

from ...groups.certificate import Certificate
from ...transport.codec import CodecError, decode_pair, encode_pair
from ..output import output_error, output_result, parse_hex


def register(subparsers: argparse._SubParsersAction) -> None:
    """Register payload commands on the CLI parser."""
    payload_parser = subparsers.add_parser("payload", help="Build a join payload")
    payload_parser.add_argument("--public-key", required=True, help="Own public key hex")
    payload_parser.add_argument(
        "--proof",
        required=True,
        help="CA signature hex, or certificate bytes hex for quorum groups",
    )
    payload_parser.set_defaults(func=cmd_payload)

    inspect_parser = subparsers.add_parser("inspect-payload", help="Decode a join payload")
    inspect_parser.add_argument("payload", help="Payload hex")
    inspect_parser.add_argument("--json", action="store_true", help="Output as JSON")
    inspect_parser.set_defaults(func=cmd_inspect_payload)


def cmd_payload(args: argparse.Namespace) -> int:
    """Print the hex join payload for a key and its proof."""
    try:
        public_key = parse_hex(args.public_key, "public key")
        proof = parse_hex(args.proof, "proof")
        print(encode_pair(public_key, proof).hex())
    except (ValueError, CodecError) as e:
        output_error(str(e))
        return 1
    return 0


def cmd_inspect_payload(args: argparse.Namespace) -> int:
    """Decode a join payload and show its fields."""
    try:
        public_key, proof = decode_pair(parse_hex(args.payload, "payload"))
    except (ValueError, CodecError) as e:
        output_error(str(e))
        return 1

    result: dict = {"public_key": public_key.hex(), "proof": proof.hex()}
    try:
        certificate = Certificate.from_bytes(proof)
    except CodecError:
        result["kind"] = "certificate-signature"
    else:
        result["kind"] = "vote-certificate"
        result["certificate"] = certificate.to_dict()
    output_result(result, as_json=args.json)
    return 0
