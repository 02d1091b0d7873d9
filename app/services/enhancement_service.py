import re
import asyncio
import logging

from pydantic import BaseModel, Field
from typing import List, Literal, Optional, Tuple

from app.agent import AgentManager, GatewayBlockedError, GatewayEmptyError
from app.core import settings
from app.prompt import prompt_factory
from .exceptions import EngineFailure, InvalidTransitionError, JobNotFoundError, PointProcessingError
from .job_ledger import EnhancementJob, JobLedger, JobStatus, PointResult
from .stream_broker import EventStreamBroker, StreamEvent

logger = logging.getLogger(__name__)

LIMIT_REACHED_SUGGESTION = "Processing limit reached."
FILTERED_OUT_SUGGESTION = "Could not generate valid suggestions for this point."
BLOCKED_SUGGESTION = "Could not generate suggestions for this point."
BLOCKED_ERROR = "Suggestion generation failed or blocked."

MAX_SUGGESTIONS_PER_POINT = 2
MIN_SUGGESTION_LENGTH = 11

_BULLET_MARKER = re.compile(r"^[-*•]\s*")


class EnhancementContext(BaseModel):
    """What the points are being tailored towards: a whole role or one JD."""

    analysis_context: Literal["role", "jd"]
    context_name: str
    target_keywords: List[str] = Field(default_factory=list)
    jd_analysis_summary: Optional[str] = None

    def relevance_context(self) -> str:
        keywords = ", ".join(self.target_keywords)
        if self.analysis_context == "role":
            return f'the role "{self.context_name}" described by keywords: "{keywords[:1500]}"'
        summary = (self.jd_analysis_summary or "JD details unavailable")[:1500]
        return f'this job description context: "{summary}" (Keywords: {keywords[:500]})'

    def suggestion_framing(self) -> str:
        if self.analysis_context == "role":
            return f'the role "{self.context_name}"'
        return "the specific job description"


def parse_suggestions(text: str, point: str) -> List[str]:
    """
    Split a suggestion response into candidate lines, dropping bullet markers,
    short lines and lines that merely repeat the original point.
    """
    original = point.lower()
    suggestions = []
    for line in text.split("\n"):
        line = _BULLET_MARKER.sub("", line.strip())
        if len(line) >= MIN_SUGGESTION_LENGTH and line.lower() != original:
            suggestions.append(line)
    return suggestions


class PointEnhancementEngine:
    """
    Drives one job from `pending` to a terminal status, enhancing its points
    one at a time.

    Each point gets a relevance check against the job's context, then a
    rewrite prompt chosen by that verdict. Results are appended to the ledger
    before being published, so a subscriber that connects late can always
    replay them. Failures while handling a single point end up on that
    point's result; only a failure of the loop itself ends the job in `error`.
    """

    def __init__(
        self,
        agent_manager: AgentManager,
        ledger: JobLedger,
        broker: EventStreamBroker,
        max_points: int = settings.MAX_POINTS_PER_JOB,
        connect_grace: float = settings.STREAM_CONNECT_GRACE_SECONDS,
        teardown_delay: float = settings.STREAM_TEARDOWN_DELAY_SECONDS,
        retention: float = settings.JOB_RETENTION_SECONDS,
    ):
        self.agent_manager = agent_manager
        self.ledger = ledger
        self.broker = broker
        self.max_points = max_points
        self.connect_grace = connect_grace
        self.teardown_delay = teardown_delay
        self.retention = retention

    async def run(self, job_id: str, context: EnhancementContext) -> None:
        try:
            job = self.ledger.set_status(job_id, JobStatus.PROCESSING)
        except (JobNotFoundError, InvalidTransitionError) as e:
            logger.error(f"[Job {job_id}] Cannot start processing: {e}")
            return

        logger.info(f"[Job {job_id}] Starting processing of {len(job.pending_points)} points")
        try:
            # give the client a moment to open the stream
            if self.connect_grace > 0:
                await asyncio.sleep(self.connect_grace)
            processed_count = await self._process_points(job, context)
            if job.status == JobStatus.PROCESSING:
                message = f"Processing complete. {processed_count} points processed."
                self.ledger.set_status(job_id, JobStatus.DONE)
                self.broker.publish(job_id, StreamEvent.done(message))
                logger.info(f"[Job {job_id}] {message}")
        except asyncio.CancelledError:
            if job.status == JobStatus.PROCESSING:
                self.ledger.set_status(job_id, JobStatus.ABORTED)
            raise
        except Exception as e:
            failure = e if isinstance(e, EngineFailure) else EngineFailure(str(e))
            logger.exception(f"[Job {job_id}] Unrecoverable error during processing: {failure}")
            if job.status == JobStatus.PROCESSING:
                self.ledger.set_status(job_id, JobStatus.ERROR, str(failure) or None)
            self.broker.publish(job_id, StreamEvent.error(job.error_message or str(failure)))
        finally:
            self.broker.schedule_teardown(job_id, self.teardown_delay)
            self.ledger.schedule_expiry(job_id, self.retention)

    async def _process_points(self, job: EnhancementJob, context: EnhancementContext) -> int:
        job_id = job.job_id
        total = len(job.pending_points)
        relevance_context = context.relevance_context()
        processed_count = 0

        for point in job.pending_points:
            if self.broker.is_abandoned(job_id):
                logger.info(f"[Job {job_id}] Client disconnected. Aborting processing.")
                self.ledger.set_status(job_id, JobStatus.ABORTED)
                break

            if processed_count >= self.max_points:
                logger.warning(
                    f"[Job {job_id}] Reached maximum point processing limit ({self.max_points})"
                )
                notice = PointResult(original=point, suggestions=[LIMIT_REACHED_SUGGESTION])
                job.limit_notice = notice
                self.broker.publish(job_id, StreamEvent.point_processed(notice))
                break

            processed_count += 1
            logger.info(f"[Job {job_id}] Processing point {processed_count}/{total}: {point[:50]!r}")
            self.broker.publish(job_id, StreamEvent.progress(processed_count, total))

            result = await self._process_point(job_id, point, context, relevance_context)
            job.processed_points.append(result)
            self.broker.publish(job_id, StreamEvent.point_processed(result))

        return processed_count

    async def _process_point(
        self,
        job_id: str,
        point: str,
        context: EnhancementContext,
        relevance_context: str,
    ) -> PointResult:
        is_relevant = False
        suggestions: List[str] = []
        error: Optional[str] = None
        try:
            is_relevant = await self._check_relevance(job_id, point, relevance_context)
            suggestions, error = await self._suggest(job_id, point, context, is_relevant)
        except Exception as e:
            failure = PointProcessingError(point, e)
            logger.error(f"[Job {job_id}] Error processing point {point[:50]!r}: {failure}")
            error = str(failure)
            suggestions = [f"Error: {error}"]

        return PointResult(
            original=point,
            suggestions=suggestions[:MAX_SUGGESTIONS_PER_POINT],
            is_relevant=is_relevant,
            is_default_suggestion=error is None and len(suggestions) > 0,
            error=error,
        )

    async def _check_relevance(self, job_id: str, point: str, relevance_context: str) -> bool:
        prompt = prompt_factory.get("point_relevance").format(relevance_context, point)
        try:
            answer = await self.agent_manager.run(
                prompt=prompt, temperature=0.1, max_output_tokens=10
            )
        except (GatewayBlockedError, GatewayEmptyError) as e:
            logger.warning(f"[Job {job_id}] Relevance check blocked/failed, assuming not relevant. {e}")
            return False
        return "yes" in answer.strip().lower()

    async def _suggest(
        self,
        job_id: str,
        point: str,
        context: EnhancementContext,
        is_relevant: bool,
    ) -> Tuple[List[str], Optional[str]]:
        if is_relevant:
            prompt = prompt_factory.get("point_suggestion_relevant").format(
                ", ".join(context.target_keywords)[:1000],
                context.suggestion_framing(),
                point,
            )
        else:
            prompt = prompt_factory.get("point_suggestion_general").format(point)

        try:
            text = await self.agent_manager.run(
                prompt=prompt, temperature=0.7, max_output_tokens=512
            )
        except (GatewayBlockedError, GatewayEmptyError) as e:
            logger.warning(f"[Job {job_id}] Suggestion generation blocked/failed. {e}")
            return [BLOCKED_SUGGESTION], BLOCKED_ERROR

        suggestions = parse_suggestions(text, point)
        if not suggestions:
            logger.warning(f"[Job {job_id}] AI returned suggestions, but none passed filtering.")
            suggestions = [FILTERED_OUT_SUGGESTION]
        return suggestions, None


async def suggest_alternatives(agent_manager: AgentManager, point: str, limit: int = 3) -> List[str]:
    """Three standalone rewrites of a single bullet. Gateway errors propagate."""
    prompt = prompt_factory.get("point_alternatives").format(point)
    text = await agent_manager.run(prompt=prompt)
    suggestions = [line.strip() for line in text.split("\n") if line.strip()]
    return suggestions[:limit]
