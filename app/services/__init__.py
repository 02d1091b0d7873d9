from .job_ledger import EnhancementJob, JobLedger, JobStatus, PointResult
from .stream_broker import EventStreamBroker, EventType, StreamEvent, StreamSubscription
from .extraction_service import TextExtractor, TextSource, strip_html
from .resume_service import ResumeService, flatten_points, parse_structured_json
from .enhancement_service import (
    EnhancementContext,
    PointEnhancementEngine,
    parse_suggestions,
    suggest_alternatives,
)
from .materializer import DocumentMaterializer, apply_selections
from .render_service import layout_resume, render_resume_pdf
from .role_service import RoleService
from .customize_service import CustomizeService
from .exceptions import (
    ExtractionError,
    StructuringError,
    PointProcessingError,
    EngineFailure,
    InvalidTransitionError,
    JobNotFoundError,
    JobNotReadyError,
    UpstreamFailureError,
    RoleNotFoundError,
    JobDescriptionNotFoundError,
    JobDescriptionNotReadyError,
)

__all__ = [
    "EnhancementJob",
    "JobLedger",
    "JobStatus",
    "PointResult",
    "EventStreamBroker",
    "EventType",
    "StreamEvent",
    "StreamSubscription",
    "TextExtractor",
    "TextSource",
    "strip_html",
    "ResumeService",
    "flatten_points",
    "parse_structured_json",
    "EnhancementContext",
    "PointEnhancementEngine",
    "parse_suggestions",
    "suggest_alternatives",
    "DocumentMaterializer",
    "apply_selections",
    "layout_resume",
    "render_resume_pdf",
    "RoleService",
    "CustomizeService",
    "ExtractionError",
    "StructuringError",
    "PointProcessingError",
    "EngineFailure",
    "InvalidTransitionError",
    "JobNotFoundError",
    "JobNotReadyError",
    "UpstreamFailureError",
    "RoleNotFoundError",
    "JobDescriptionNotFoundError",
    "JobDescriptionNotReadyError",
]
