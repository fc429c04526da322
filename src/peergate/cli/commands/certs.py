"""Certificate commands: issue and verify."""

from __future__ import annotations

import argparse

from ...core.config import get_config
from ...core.exceptions import BadCertificateError
from ...groups.certificate import Certificate
from ...identity.scheme import Ed25519Scheme, SigningError
from ..output import output_error, output_result, parse_hex


def register(subparsers: argparse._SubParsersAction) -> None:
    """Register certificate commands on the CLI parser."""
    issue_parser = subparsers.add_parser("issue", help="Issue a certificate for a subject key")
    issue_parser.add_argument(
        "--ca-key",
        help="Issuer secret key hex (default: PEERGATE_IDENTITY_SECRET_KEY)",
    )
    issue_parser.add_argument("--subject", required=True, help="Subject public key hex")
    issue_parser.add_argument("--json", action="store_true", help="Output the certificate as JSON")
    issue_parser.set_defaults(func=cmd_issue)

    verify_parser = subparsers.add_parser("verify-cert", help="Verify a certificate signature")
    verify_parser.add_argument(
        "--issuer",
        help="Issuer public key hex (default: PEERGATE_CA_PUBLIC_KEY)",
    )
    verify_parser.add_argument("--subject", required=True, help="Subject public key hex")
    verify_parser.add_argument("--signature", required=True, help="Issuer signature hex")
    verify_parser.set_defaults(func=cmd_verify_cert)


def cmd_issue(args: argparse.Namespace) -> int:
    """Sign a subject public key with the issuer's secret key."""
    scheme = Ed25519Scheme()
    try:
        secret = parse_hex(args.ca_key or get_config().identity_secret_key, "issuer secret key")
        subject = parse_hex(args.subject, "subject")
        issuer = Ed25519Scheme.public_key_for(secret)
        certificate = Certificate.issue(scheme, secret, issuer, subject)
    except (ValueError, SigningError) as e:
        output_error(str(e))
        return 1

    if args.json:
        print(certificate.to_json_string())
    else:
        output_result(certificate.to_dict())
    return 0


def cmd_verify_cert(args: argparse.Namespace) -> int:
    """Exit 0 if the certificate verifies, 1 otherwise."""
    scheme = Ed25519Scheme()
    try:
        issuer = parse_hex(args.issuer or get_config().ca_public_key, "issuer")
        subject = parse_hex(args.subject, "subject")
        signature = parse_hex(args.signature, "signature")
    except ValueError as e:
        output_error(str(e))
        return 1

    certificate = Certificate(subject_pk=subject, issuer_pk=issuer, issuer_signature=signature)
    try:
        certificate.verify_or_raise(scheme)
    except BadCertificateError as e:
        print("invalid")
        output_error(e.message)
        return 1
    print("valid")
    return 0
