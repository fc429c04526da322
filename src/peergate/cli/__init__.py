# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""PeerGate CLI - keys, certificates and join payloads."""

from .main import app, main

__all__ = ["main", "app"]
