import logging

from typing import Dict, Optional

from app.schemas.pydantic import StructuredResumeModel
from .exceptions import JobNotFoundError, JobNotReadyError, UpstreamFailureError
from .job_ledger import JobLedger, JobStatus
from .render_service import render_resume_pdf

logger = logging.getLogger(__name__)


def apply_selections(
    resume: StructuredResumeModel, selections: Optional[Dict[str, Optional[str]]]
) -> StructuredResumeModel:
    """
    Return a deep copy of `resume` with each accomplishment replaced by its
    selected text. Accomplishments without a (non-empty) selection keep
    their original wording; `resume` itself is never modified.
    """
    final = resume.model_copy(deep=True)
    selections = selections or {}
    for entry in final.experience:
        entry.accomplishments = [selections.get(acc) or acc for acc in entry.accomplishments]
    return final


class DocumentMaterializer:
    def __init__(self, ledger: JobLedger):
        self.ledger = ledger

    def materialize(self, job_id: str, selections: Optional[Dict[str, Optional[str]]] = None) -> bytes:
        job = self.ledger.get(job_id)
        if job is None or job.structured_resume is None:
            raise JobNotFoundError(job_id)
        if job.status in (JobStatus.PENDING, JobStatus.PROCESSING):
            raise JobNotReadyError(job_id)
        if job.status == JobStatus.ERROR:
            raise UpstreamFailureError(job_id, job.error_message)

        final = apply_selections(job.structured_resume, selections)
        logger.info(f"[Job {job_id}] Generating PDF with {len(selections or {})} selections")
        return render_resume_pdf(final)
