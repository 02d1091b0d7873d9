class ExtractionError(Exception):
    """Raised when a URL or PDF source cannot be turned into usable text."""

    def __init__(self, message: str, source: str | None = None):
        self.source = source
        super().__init__(message)


class StructuringError(Exception):
    """Raised when the model output cannot be turned into a structured resume."""

    def __init__(self, message: str = "AI returned invalid or incomplete JSON structure for the resume."):
        super().__init__(message)


class PointProcessingError(Exception):
    """Failure scoped to a single bullet point; recorded on its result."""

    def __init__(self, point: str, cause: Exception):
        self.point = point
        self.cause = cause
        super().__init__(str(cause) or "Unknown error processing point.")


class EngineFailure(Exception):
    """Failure of the enhancement loop itself; terminates the job with `error`."""


class InvalidTransitionError(Exception):
    """Raised when a job status change is not allowed by the state machine."""

    def __init__(self, job_id: str, current: str, target: str):
        self.job_id = job_id
        self.current = current
        self.target = target
        super().__init__(f"Job {job_id}: invalid status transition {current} -> {target}")


class JobNotFoundError(Exception):
    """Raised when a job id is unknown or its structured data is gone."""

    def __init__(self, job_id: str, message: str | None = None):
        self.job_id = job_id
        super().__init__(
            message
            or "Structured job data not found. Process might not be complete, failed, or job expired."
        )


class JobNotReadyError(Exception):
    """Raised when a document is requested while the job is still running."""

    def __init__(self, job_id: str, message: str = "Resume analysis is still in progress. Please wait."):
        self.job_id = job_id
        super().__init__(message)


class UpstreamFailureError(Exception):
    """Raised when a document is requested for a job that ended in `error`."""

    def __init__(self, job_id: str, error_message: str | None):
        self.job_id = job_id
        self.error_message = error_message
        super().__init__(f"Cannot generate PDF, the initial analysis failed: {error_message}")


class RoleNotFoundError(Exception):
    def __init__(self, role_id: str, message: str = "Role not found."):
        self.role_id = role_id
        super().__init__(message)


class JobDescriptionNotFoundError(Exception):
    def __init__(self, jd_id: str, message: str = "JD not found."):
        self.jd_id = jd_id
        super().__init__(message)


class JobDescriptionNotReadyError(Exception):
    """Raised when a JD is used as customization context before analysis completed."""

    def __init__(self, jd_id: str, message: str):
        self.jd_id = jd_id
        super().__init__(message)
