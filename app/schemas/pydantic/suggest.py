from typing import List, Optional
from pydantic import BaseModel, Field


class SuggestRequest(BaseModel):
    point: Optional[str] = Field(None, description="Resume bullet point to rewrite")


class SuggestResponse(BaseModel):
    suggestions: List[str]
