"""CLI command modules for PeerGate.

Each module exposes a ``register(subparsers)`` function that wires up
its argparse sub-commands and sets ``parser.set_defaults(func=handler)``.
"""

from . import certs, keys, payload
from .certs import cmd_issue, cmd_verify_cert
from .keys import cmd_keygen
from .payload import cmd_inspect_payload, cmd_payload

# All command modules with register() functions, in registration order.
COMMAND_MODULES = [
    keys,
    certs,
    payload,
]

__all__ = [
    "COMMAND_MODULES",
    "cmd_keygen",
    "cmd_issue",
    "cmd_verify_cert",
    "cmd_payload",
    "cmd_inspect_payload",
]
