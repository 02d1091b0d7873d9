from .structured_resume import StructuredResumeModel
from .customize import CustomizeJobResponse, GenerateDocumentRequest
from .role import RoleCreateRequest, JdUrlRequest
from .suggest import SuggestRequest, SuggestResponse

__all__ = [
    "StructuredResumeModel",
    "CustomizeJobResponse",
    "GenerateDocumentRequest",
    "RoleCreateRequest",
    "JdUrlRequest",
    "SuggestRequest",
    "SuggestResponse",
]
