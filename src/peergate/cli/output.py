# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Output helpers shared by CLI commands."""

from __future__ import annotations

import json
import sys
from typing import Any


def output_result(data: dict[str, Any], as_json: bool = False) -> None:
    """Print a result as JSON or as aligned ``key: value`` lines."""
    if as_json:
        print(json.dumps(data, indent=2, default=str))
        return
    width = max((len(k) for k in data), default=0)
    for key, value in data.items():
        print(f"{key.ljust(width)}  {value}")


def output_error(message: str) -> None:
    """Print error message to stderr."""
    print(f"Error: {message}", file=sys.stderr)


def parse_hex(value: str | None, name: str) -> bytes:
    """Decode a hex argument.

    Raises:
        ValueError: If the value is missing or not hex.
    """
    if not value:
        raise ValueError(f"{name} is required")
    try:
        return bytes.fromhex(value.strip())
    except ValueError as e:
        raise ValueError(f"{name} is not valid hex") from e
