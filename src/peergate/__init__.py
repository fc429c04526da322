# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""PeerGate - admission control for distributed peer groups.

PeerGate decides whether a joining peer may become a member of a peer group
and maintains the resulting membership set.

Admission policies:
  - Certificate: the peer presents a CA signature over its public key.
  - Quorum: the peer is admitted once a configurable fraction of current
    members have co-signed its enrollment.
  - Permissionless: baseline that refuses nobody and admits nobody.

The network runtime delivers join, join-result, disconnect and heartbeat
events to a GroupActor; the actor hands them to the policy one at a time
and the policy answers each join with exactly one JoinVerdict.

CLI entry point: ``peergate``
"""

__version__ = "0.1.0"
