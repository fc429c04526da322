"""Peer lifecycle state machine shared by every admission policy.

Each peer (keyed by address or by public key, depending on the policy) is in
exactly one state::

    UNKNOWN -> PENDING -> MEMBER -> UNKNOWN

A departed peer returns to UNKNOWN and is evaluated from scratch if it asks
again. There is no banned state and pending entries never time out.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable
from enum import Enum
from typing import Generic, TypeVar

from ..core.exceptions import InvalidTransitionError

K = TypeVar("K", bound=Hashable)


class PeerState(str, Enum):
    """Admission state of a peer."""

    UNKNOWN = "unknown"  # Never admitted, or left
    PENDING = "pending"  # Certificate under check or votes being collected
    MEMBER = "member"  # Admitted


ALLOWED_TRANSITIONS: dict[PeerState, frozenset[PeerState]] = {
    PeerState.UNKNOWN: frozenset({PeerState.UNKNOWN, PeerState.PENDING, PeerState.MEMBER}),
    PeerState.PENDING: frozenset({PeerState.PENDING, PeerState.MEMBER, PeerState.UNKNOWN}),
    PeerState.MEMBER: frozenset({PeerState.MEMBER, PeerState.UNKNOWN}),
}


class PeerLifecycle(Generic[K]):
    """Explicit per-peer state table.

    Only non-UNKNOWN states are stored; any key not in the table is UNKNOWN.
    """

    def __init__(self, describe: Callable[[K], str] = str):
        self._states: dict[K, PeerState] = {}
        self._describe = describe

    def state(self, key: K) -> PeerState:
        return self._states.get(key, PeerState.UNKNOWN)

    def transition(self, key: K, target: PeerState) -> PeerState:
        """Move ``key`` to ``target``.

        Returns:
            The state the key was in before the transition.

        Raises:
            InvalidTransitionError: If ``target`` is not reachable from the current state.
        """
        current = self.state(key)
        if target not in ALLOWED_TRANSITIONS[current]:
            raise InvalidTransitionError(self._describe(key), current.value, target.value)
        if target is PeerState.UNKNOWN:
            self._states.pop(key, None)
        else:
            self._states[key] = target
        return current

    def keys_in(self, state: PeerState) -> list[K]:
        if state is PeerState.UNKNOWN:
            raise ValueError("UNKNOWN keys are not tracked")
        return [key for key, value in self._states.items() if value is state]

    def counts(self) -> dict[str, int]:
        result = {PeerState.PENDING.value: 0, PeerState.MEMBER.value: 0}
        for value in self._states.values():
            result[value.value] += 1
        return result

    def __contains__(self, key: object) -> bool:
        return key in self._states

    def __len__(self) -> int:
        return len(self._states)
