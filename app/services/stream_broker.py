from __future__ import annotations

import asyncio
import json
import logging
from enum import Enum
from typing import Any, AsyncIterator, Dict, Optional, Set

from pydantic import BaseModel, Field

from .job_ledger import EnhancementJob, JobLedger, JobStatus, PointResult

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    CONNECTED = "connected"
    PROGRESS = "progress"
    POINT_PROCESSED = "point_processed"
    DONE = "done"
    ERROR = "error"


class StreamEvent(BaseModel):
    type: EventType
    payload: Dict[str, Any] = Field(default_factory=dict)

    @property
    def is_terminal(self) -> bool:
        return self.type in (EventType.DONE, EventType.ERROR)

    def to_sse(self) -> str:
        return f"data: {json.dumps(self.model_dump(mode='json'))}\n\n"

    @classmethod
    def connected(cls, message: str) -> "StreamEvent":
        return cls(type=EventType.CONNECTED, payload={"message": message})

    @classmethod
    def progress(cls, current: int, total: int) -> "StreamEvent":
        return cls(
            type=EventType.PROGRESS,
            payload={"current": current, "total": total, "message": f"Processing point {current}..."},
        )

    @classmethod
    def point_processed(cls, result: PointResult) -> "StreamEvent":
        return cls(type=EventType.POINT_PROCESSED, payload=result.to_payload())

    @classmethod
    def done(cls, message: str) -> "StreamEvent":
        return cls(type=EventType.DONE, payload={"message": message})

    @classmethod
    def error(cls, message: str) -> "StreamEvent":
        return cls(type=EventType.ERROR, payload={"message": message})


_CLOSE = object()


class StreamSubscription:
    """
    One client's channel for a job. Events are queued without bound and read
    by iterating the subscription; iteration ends after a terminal event or
    once the subscription is closed and its queue drained.
    """

    def __init__(self, job_id: str):
        self.job_id = job_id
        self.closed = False
        self._queue: asyncio.Queue = asyncio.Queue()

    def send(self, event: StreamEvent) -> bool:
        if self.closed:
            return False
        self._queue.put_nowait(event)
        return True

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._queue.put_nowait(_CLOSE)

    async def events(self) -> AsyncIterator[StreamEvent]:
        while True:
            item = await self._queue.get()
            if item is _CLOSE:
                return
            yield item
            if item.is_terminal:
                return

    def __aiter__(self) -> AsyncIterator[StreamEvent]:
        return self.events()


class EventStreamBroker:
    """
    Owns the job id -> subscription register.

    At most one subscription is live per job: a new `subscribe` closes the
    previous one. Subscribing replays every buffered result from the ledger
    before live delivery; for a job that already ended the terminal event is
    sent straight away and the subscription closes without being registered.
    `publish` is a no-op while nobody is attached.
    """

    def __init__(self, ledger: JobLedger):
        self.ledger = ledger
        self._subscriptions: Dict[str, StreamSubscription] = {}
        # Jobs that have had a subscriber at some point; used to tell
        # "client went away" apart from "client has not connected yet".
        self._attached: Set[str] = set()

    def subscribe(self, job_id: str) -> StreamSubscription:
        subscription = StreamSubscription(job_id)
        job = self.ledger.get(job_id)
        if job is None:
            logger.info(f"[Job {job_id}] Stream requested for unknown job")
            subscription.send(StreamEvent.error("Job not found or expired."))
            subscription.close()
            return subscription

        previous = self._subscriptions.pop(job_id, None)
        if previous is not None:
            logger.info(f"[Job {job_id}] New subscriber replaces the previous one")
            previous.close()

        subscription.send(StreamEvent.connected(self._connected_message(job)))
        for result in job.processed_points:
            subscription.send(StreamEvent.point_processed(result))
        if job.limit_notice is not None:
            subscription.send(StreamEvent.point_processed(job.limit_notice))

        terminal = self._terminal_event(job)
        if terminal is not None:
            logger.info(
                f"[Job {job_id}] Replayed {len(job.processed_points)} points and "
                f"'{terminal.type.value}' to late subscriber"
            )
            subscription.send(terminal)
            subscription.close()
            return subscription

        self._subscriptions[job_id] = subscription
        self._attached.add(job_id)
        logger.info(f"[Job {job_id}] Subscriber attached (status: {job.status.value})")
        return subscription

    def publish(self, job_id: str, event: StreamEvent) -> bool:
        subscription = self._subscriptions.get(job_id)
        if subscription is None:
            return False
        return subscription.send(event)

    def unsubscribe(self, job_id: str, subscription: Optional[StreamSubscription] = None) -> None:
        """Detach the live subscriber; with `subscription`, only if it is still the live one."""
        current = self._subscriptions.get(job_id)
        if current is None or (subscription is not None and current is not subscription):
            return
        del self._subscriptions[job_id]
        current.close()
        logger.info(f"[Job {job_id}] Subscriber detached")

    def is_subscribed(self, job_id: str) -> bool:
        return job_id in self._subscriptions

    def is_abandoned(self, job_id: str) -> bool:
        """True once a subscriber has attached and none is attached now."""
        return job_id in self._attached and job_id not in self._subscriptions

    def close_job(self, job_id: str) -> None:
        subscription = self._subscriptions.pop(job_id, None)
        if subscription is not None:
            subscription.close()
        self._attached.discard(job_id)
        logger.info(f"[Job {job_id}] Cleaned up stream resources")

    def schedule_teardown(self, job_id: str, delay: float) -> None:
        loop = asyncio.get_running_loop()
        loop.call_later(delay, self.close_job, job_id)

    def close_all(self) -> None:
        for job_id in list(self._subscriptions):
            self.close_job(job_id)
        self._attached.clear()

    @staticmethod
    def _connected_message(job: EnhancementJob) -> str:
        if job.status == JobStatus.PENDING and not job.processed_points:
            return "Connected to stream. Waiting for processing..."
        return "Connected to stream."

    @staticmethod
    def _terminal_event(job: EnhancementJob) -> Optional[StreamEvent]:
        if job.status == JobStatus.DONE:
            return StreamEvent.done("Processing already complete.")
        if job.status == JobStatus.ERROR:
            return StreamEvent.error(job.error_message or "An unknown error occurred previously.")
        if job.status == JobStatus.ABORTED:
            return StreamEvent.error("Processing was aborted before completion.")
        return None
