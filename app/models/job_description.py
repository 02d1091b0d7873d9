from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class JdType(str, Enum):
    URL = "url"
    PDF = "pdf"


class JdStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class JobDescription(BaseModel):
    """
    A job description attached to a role. `source` is the URL for `url`
    JDs and the stored file name (`<id>.pdf`) for uploaded ones.
    """

    id: str
    role_id: str = Field(alias="roleId")
    type: JdType
    source: str
    original_filename: Optional[str] = Field(None, alias="originalFilename")
    status: JdStatus = JdStatus.PENDING
    analysis: Optional[str] = None
    keywords: List[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow, alias="createdAt")
    analyzed_at: Optional[datetime] = Field(None, alias="analyzedAt")
    error: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)

    @property
    def display_name(self) -> str:
        return self.original_filename or self.source

    def to_record(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")
