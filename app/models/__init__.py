from .role import Role
from .job_description import JdStatus, JdType, JobDescription

__all__ = [
    "Role",
    "JdStatus",
    "JdType",
    "JobDescription",
]
