from typing import Optional
from pydantic import BaseModel, Field


class RoleCreateRequest(BaseModel):
    name: Optional[str] = Field(None, description="Role name")


class JdUrlRequest(BaseModel):
    url: Optional[str] = Field(None, description="Job description page URL")
