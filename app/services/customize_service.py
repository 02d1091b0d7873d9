import uuid
import logging

from typing import Awaitable, Callable, Optional

from app.schemas.pydantic import CustomizeJobResponse
from .enhancement_service import EnhancementContext, PointEnhancementEngine
from .extraction_service import TextExtractor
from .job_ledger import EnhancementJob, JobLedger
from .resume_service import ResumeService
from .role_service import RoleService

logger = logging.getLogger(__name__)

Spawner = Callable[[Awaitable[None]], object]


class CustomizeService:
    """
    Setup phase of a customization request.

    Resolves the target context, extracts and structures the resume, then
    registers a `pending` job and hands it to the enhancement engine as a
    detached task. Any failure before the job is registered propagates to
    the caller and leaves nothing behind in the ledger.
    """

    def __init__(
        self,
        role_service: RoleService,
        resume_service: ResumeService,
        ledger: JobLedger,
        engine: PointEnhancementEngine,
        spawn: Spawner,
        extractor: TextExtractor | None = None,
    ):
        self.role_service = role_service
        self.resume_service = resume_service
        self.ledger = ledger
        self.engine = engine
        self.spawn = spawn
        self.extractor = extractor or TextExtractor()

    @staticmethod
    def validate_target(role_id: Optional[str], jd_id: Optional[str]) -> None:
        if not role_id and not jd_id:
            raise ValueError("Either Role ID or JD ID is required.")
        if role_id and jd_id:
            raise ValueError("Provide either Role ID or JD ID, not both.")

    async def resolve_context(self, role_id: Optional[str], jd_id: Optional[str]) -> EnhancementContext:
        self.validate_target(role_id, jd_id)
        if role_id:
            role, keywords = await self.role_service.aggregate_role_keywords(role_id)
            return EnhancementContext(
                analysis_context="role",
                context_name=role.name,
                target_keywords=keywords,
            )

        jd = await self.role_service.require_completed_jd(jd_id)
        if not jd.keywords:
            logger.warning(f"No keywords found for JD {jd.display_name}.")
        return EnhancementContext(
            analysis_context="jd",
            context_name=jd.display_name,
            target_keywords=list(jd.keywords),
            jd_analysis_summary=jd.analysis or "Analysis summary not available.",
        )

    async def create_job(
        self,
        resume_bytes: bytes,
        role_id: Optional[str] = None,
        jd_id: Optional[str] = None,
    ) -> CustomizeJobResponse:
        context = await self.resolve_context(role_id, jd_id)
        job_id = str(uuid.uuid4())
        logger.info(
            f"[Job {job_id}] Customize request for {context.analysis_context} {context.context_name!r}"
        )

        resume_text = await self.extractor.extract_pdf_bytes(resume_bytes)
        logger.info(f"[Job {job_id}] Parsed resume PDF. Text length: {len(resume_text)}")
        structured, points = await self.resume_service.structure_resume(resume_text)

        self.ledger.create(
            EnhancementJob(job_id=job_id, structured_resume=structured, pending_points=points)
        )
        self.spawn(self.engine.run(job_id, context))

        return CustomizeJobResponse(
            job_id=job_id,
            message=f"Processing started for {len(points)} points. Connect to the stream for results.",
            analysis_context=context.analysis_context,
            context_name=context.context_name,
            jd_analysis_summary=context.jd_analysis_summary,
        )
