from typing import Dict, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field


class CustomizeJobResponse(BaseModel):
    job_id: str = Field(..., alias="jobId")
    message: str
    analysis_context: Literal["role", "jd"] = Field(..., alias="analysisContext")
    context_name: str = Field(..., alias="contextName")
    jd_analysis_summary: Optional[str] = Field(None, alias="jdAnalysisSummary")

    model_config = ConfigDict(populate_by_name=True)


class GenerateDocumentRequest(BaseModel):
    job_id: Optional[str] = Field(None, alias="jobId", description="Job returned by customize-resume")
    selections: Optional[Dict[str, Optional[str]]] = Field(
        None, description="Original accomplishment text -> chosen replacement"
    )

    model_config = ConfigDict(populate_by_name=True)
