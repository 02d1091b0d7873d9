from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.pydantic import StructuredResumeModel
from .exceptions import InvalidTransitionError, JobNotFoundError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class JobStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    DONE = "done"
    ERROR = "error"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({JobStatus.DONE, JobStatus.ERROR, JobStatus.ABORTED})

ALLOWED_TRANSITIONS: Dict[JobStatus, frozenset] = {
    JobStatus.PENDING: frozenset({JobStatus.PROCESSING, JobStatus.ERROR}),
    JobStatus.PROCESSING: frozenset({JobStatus.DONE, JobStatus.ERROR, JobStatus.ABORTED}),
    JobStatus.DONE: frozenset(),
    JobStatus.ERROR: frozenset(),
    JobStatus.ABORTED: frozenset(),
}


class PointResult(BaseModel):
    """Outcome for one accomplishment point. Never changes once created."""

    original: str
    suggestions: List[str] = Field(default_factory=list)
    is_relevant: bool = False
    is_default_suggestion: bool = False
    error: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    def to_payload(self) -> dict:
        return {
            "original": self.original,
            "suggestions": list(self.suggestions),
            "isRelevant": self.is_relevant,
            "isDefault": self.is_default_suggestion,
            "error": self.error,
        }


class EnhancementJob(BaseModel):
    job_id: str
    structured_resume: StructuredResumeModel
    pending_points: List[str] = Field(default_factory=list)
    processed_points: List[PointResult] = Field(default_factory=list)
    # Placeholder emitted when the per-job point ceiling is hit; kept apart
    # from processed_points so that list never exceeds the ceiling.
    limit_notice: Optional[PointResult] = None
    status: JobStatus = JobStatus.PENDING
    error_message: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    finished_at: Optional[datetime] = None


def transition(job: EnhancementJob, target: JobStatus, error_message: str | None = None) -> EnhancementJob:
    """The only place a job's status changes."""
    if target not in ALLOWED_TRANSITIONS[job.status]:
        raise InvalidTransitionError(job.job_id, job.status.value, target.value)
    logger.debug(f"[Job {job.job_id}] {job.status.value} -> {target.value}")
    job.status = target
    if target == JobStatus.ERROR:
        job.error_message = error_message or "An unknown background processing error occurred."
    if target.is_terminal:
        job.finished_at = datetime.utcnow()
    return job


class JobLedger:
    """
    Process-wide, in-memory map of job id -> EnhancementJob.

    One writer per job (the enhancement engine); readers are the stream
    broker and the document materializer. Nothing here survives a restart.
    """

    def __init__(self):
        self._jobs: Dict[str, EnhancementJob] = {}
        self._expiry_handles: Dict[str, asyncio.TimerHandle] = {}

    def __contains__(self, job_id: str) -> bool:
        return job_id in self._jobs

    def __len__(self) -> int:
        return len(self._jobs)

    def create(self, job: EnhancementJob) -> EnhancementJob:
        if job.job_id in self._jobs:
            raise ValueError(f"Job {job.job_id} already exists")
        self._jobs[job.job_id] = job
        return job

    def get(self, job_id: str) -> Optional[EnhancementJob]:
        return self._jobs.get(job_id)

    def require(self, job_id: str) -> EnhancementJob:
        job = self._jobs.get(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return job

    def update(self, job_id: str, mutator: Callable[[EnhancementJob], T]) -> T:
        return mutator(self.require(job_id))

    def set_status(self, job_id: str, target: JobStatus, error_message: str | None = None) -> EnhancementJob:
        return self.update(job_id, lambda job: transition(job, target, error_message))

    def discard(self, job_id: str) -> None:
        handle = self._expiry_handles.pop(job_id, None)
        if handle is not None:
            handle.cancel()
        if self._jobs.pop(job_id, None) is not None:
            logger.info(f"[Job {job_id}] Removed from ledger")

    def schedule_expiry(self, job_id: str, delay: float) -> None:
        """Drop the job `delay` seconds from now (must be called inside the event loop)."""
        previous = self._expiry_handles.pop(job_id, None)
        if previous is not None:
            previous.cancel()
        loop = asyncio.get_running_loop()
        self._expiry_handles[job_id] = loop.call_later(delay, self.discard, job_id)

    def clear(self) -> None:
        for handle in self._expiry_handles.values():
            handle.cancel()
        self._expiry_handles.clear()
        self._jobs.clear()
