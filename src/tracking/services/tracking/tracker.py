"""Order status state machine driven by periodic polling."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import Callable, Optional

from ...config import settings
from ...models.domain import DeliverySnapshot, OrderStatus
from .events import E, EventBus, LocationUpdated, StatusChanged
from .status_client import StatusFetchError, StatusSource

logger = logging.getLogger(__name__)


class StatusTracker:
    """Polls one order's delivery status and publishes changes.

    Every ``interval`` seconds the scheduler starts a poll unless the previous
    one is still in flight. Responses are applied only if the tracker is still
    running, the poll belongs to the current start/stop epoch and no newer poll
    has been applied already.
    """

    def __init__(
        self,
        source: StatusSource,
        *,
        interval: float | None = None,
        bus: EventBus | None = None,
        initial_status: OrderStatus | None = None,
    ) -> None:
        self.source = source
        self.interval = interval if interval is not None else settings.poll_interval_seconds
        self.bus = bus or EventBus()
        self.order_id: Optional[str] = None
        self._status = initial_status
        self._snapshot: Optional[DeliverySnapshot] = None
        self._alive = False
        self._epoch = 0
        self._sequence = 0
        self._applied_sequence = 0
        self._timer: Optional[asyncio.Task] = None
        self._inflight: Optional[asyncio.Task] = None

    @property
    def status(self) -> Optional[OrderStatus]:
        return self._status

    @property
    def ordinal(self) -> Optional[int]:
        return self._status.ordinal if self._status is not None else None

    @property
    def snapshot(self) -> Optional[DeliverySnapshot]:
        return self._snapshot

    @property
    def is_running(self) -> bool:
        return self._alive

    def subscribe(self, event_type: type[E], handler: Callable[[E], None]) -> Callable[[], None]:
        return self.bus.subscribe(event_type, handler)

    def start(self, order_id: str, *, autopoll: bool = True) -> None:
        """Begin polling; the first poll is issued immediately.

        With ``autopoll=False`` the tracker is live but only polls when
        ``poll_once`` is awaited (manual refresh).
        """
        if self._alive:
            if order_id == self.order_id:
                return
            self.stop()
        self.order_id = order_id
        self._alive = True
        self._epoch += 1
        if not autopoll:
            logger.info(f"Tracking order {order_id} (manual refresh)")
            return
        logger.info(f"Tracking order {order_id} every {self.interval:.1f}s")
        self._timer = asyncio.get_running_loop().create_task(self._run(self._epoch))

    def stop(self) -> None:
        if not self._alive and self._timer is None:
            return
        self._alive = False
        self._epoch += 1
        for task in (self._timer, self._inflight):
            if task is not None and not task.done():
                task.cancel()
        self._timer = None
        self._inflight = None
        logger.info(f"Stopped tracking order {self.order_id}")

    async def _run(self, epoch: int) -> None:
        while self._alive and epoch == self._epoch:
            self._tick()
            await asyncio.sleep(self.interval)

    def _tick(self) -> None:
        if self._inflight is not None and not self._inflight.done():
            logger.debug(f"Poll for order {self.order_id} still in flight; skipping tick")
            return
        self._inflight = asyncio.get_running_loop().create_task(self.poll_once())

    async def poll_once(self) -> bool:
        """Fetch and apply one status response. Returns True if it was applied."""
        if not self._alive or self.order_id is None:
            return False
        order_id = self.order_id
        epoch = self._epoch
        self._sequence += 1
        sequence = self._sequence
        try:
            snapshot = await self.source.fetch(order_id)
        except StatusFetchError as e:
            logger.warning(f"Status poll for order {order_id} failed: {e}")
            return False
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception(f"Unexpected error polling order {order_id}")
            return False

        if not self._alive or epoch != self._epoch:
            logger.debug(f"Dropping status response for order {order_id}: tracking stopped")
            return False
        if sequence <= self._applied_sequence:
            logger.debug(f"Dropping stale status response #{sequence} for order {order_id}")
            return False
        self._applied_sequence = sequence
        self._apply(order_id, snapshot)
        return True

    def _apply(self, order_id: str, snapshot: DeliverySnapshot) -> None:
        incoming = snapshot.status
        previous = self._status
        changed = False
        if incoming is None:
            if snapshot.raw_status:
                logger.debug(f"Ignoring unrecognized status {snapshot.raw_status!r} for order {order_id}")
        elif previous is not None and previous.is_terminal:
            if incoming != previous:
                logger.debug(f"Order {order_id} is {previous.value}; ignoring {incoming.value}")
        elif incoming != previous:
            self._status = incoming
            changed = True

        self._snapshot = snapshot.merged_onto(self._snapshot)
        # the merged view always reports the tracker's own status
        if self._snapshot.status != self._status:
            self._snapshot = replace(self._snapshot, status=self._status)

        if changed:
            logger.info(f"Order {order_id}: {previous.value if previous else None} -> {incoming.value}")
            self.bus.publish(StatusChanged(order_id=order_id, previous=previous, current=incoming))
        self.bus.publish(LocationUpdated(order_id=order_id, snapshot=self._snapshot))
