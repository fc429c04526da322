"""
Group Actor - single owner of a group policy's state.

The runtime never calls a policy directly. It submits events to the actor,
which handles them strictly one at a time. Membership state therefore needs
no locking, and no caller can observe a half-applied event.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from ..core.exceptions import ChannelClosedError
from ..core.logging import correlation_context
from ..transport.channel import OutboundChannel
from ..transport.messages import (
    InboundEvent,
    PeerDisconnected,
    PeerHeartbeat,
    PeerJoinOutcome,
    PeerJoinRequest,
)
from .base import GroupPolicy
from .types import JoinOutcome

logger = logging.getLogger(__name__)

_STOP = object()


class GroupActor:
    """
    Feeds inbound membership events to a :class:`GroupPolicy`.

    Responsible for:
    - Queuing events from the runtime
    - Dispatching each event to the matching policy hook
    - Tagging every log line of one event with a correlation ID
    - Containing a closed outbound channel to the event that hit it
    """

    def __init__(
        self,
        policy: GroupPolicy,
        sender: OutboundChannel,
        max_queue_size: int = 1000,
    ):
        """
        Initialize the GroupActor.

        Args:
            policy: Admission policy whose state this actor owns
            sender: Channel join verdicts are sent on
            max_queue_size: Bound on queued inbound events
        """
        self.policy = policy
        self.sender = sender
        self._queue: asyncio.Queue[Any] = asyncio.Queue(maxsize=max_queue_size)
        self._running = False

        self._stats: dict[str, int] = {
            "events_handled": 0,
            "joins_accepted": 0,
            "joins_rejected": 0,
            "send_failures": 0,
            "unknown_events": 0,
        }

    @property
    def running(self) -> bool:
        return self._running

    def get_stats(self) -> dict[str, Any]:
        return {**self._stats, "queued_events": self._queue.qsize()}

    async def submit(self, event: InboundEvent) -> None:
        """Queue an event, waiting if the queue is full."""
        await self._queue.put(event)

    def submit_nowait(self, event: InboundEvent) -> None:
        """Queue an event without waiting.

        Raises:
            asyncio.QueueFull: If the queue is at capacity.
        """
        self._queue.put_nowait(event)

    async def stop(self) -> None:
        """Ask :meth:`run` to return once earlier events are handled."""
        await self._queue.put(_STOP)

    async def run(self) -> None:
        """Handle queued events until :meth:`stop` is called."""
        self._running = True
        logger.info("Group actor started for group %s", self.policy.id.short())
        try:
            while True:
                event = await self._queue.get()
                try:
                    if event is _STOP:
                        break
                    await self.handle(event)
                finally:
                    self._queue.task_done()
        finally:
            self._running = False
            logger.info("Group actor stopped for group %s", self.policy.id.short())

    async def handle(self, event: InboundEvent) -> JoinOutcome | None:
        """Handle one event to completion.

        Returns:
            The join outcome for join requests, None for other events or when
            the verdict could not be delivered.
        """
        with correlation_context():
            self._stats["events_handled"] += 1

            if isinstance(event, PeerJoinRequest):
                try:
                    outcome = await self.policy.on_join_request(event, self.sender)
                except ChannelClosedError:
                    # State already committed by the policy stays committed
                    self._stats["send_failures"] += 1
                    logger.error(
                        "Join verdict for %s not delivered: outbound channel closed",
                        event.candidate_address.short(),
                    )
                    return None
                if outcome.accepted:
                    self._stats["joins_accepted"] += 1
                else:
                    self._stats["joins_rejected"] += 1
                return outcome

            if isinstance(event, PeerJoinOutcome):
                self.policy.on_join_outcome(event)
            elif isinstance(event, PeerDisconnected):
                self.policy.on_disconnect(event)
            elif isinstance(event, PeerHeartbeat):
                self.policy.on_heartbeat(event)
            else:
                self._stats["unknown_events"] += 1
                logger.warning("Ignoring unknown event type %s", type(event).__name__)
            return None
