# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Ambient services shared by every PeerGate module: config, logging, errors."""

from .config import CoreSettings, clear_config_cache, get_config
from .exceptions import (
    AdmissionError,
    BadCertificateError,
    BadVoteError,
    ChannelClosedError,
    ConfigException,
    InvalidTransitionError,
    MalformedPayloadError,
    PeerGateException,
    PersistenceWriteError,
)
from .logging import configure_logging, correlation_context, get_logger

__all__ = [
    "CoreSettings",
    "get_config",
    "clear_config_cache",
    "configure_logging",
    "correlation_context",
    "get_logger",
    "PeerGateException",
    "MalformedPayloadError",
    "AdmissionError",
    "BadCertificateError",
    "BadVoteError",
    "PersistenceWriteError",
    "ChannelClosedError",
    "ConfigException",
    "InvalidTransitionError",
]
