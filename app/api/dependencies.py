from fastapi import Depends, HTTPException, UploadFile, status

from app.agent import AgentManager
from app.core import get_db_session, JsonDataStore
from app.core.runtime import (
    get_agent_manager,
    get_job_ledger,
    get_stream_broker,
    spawn_background,
)
from app.services import (
    CustomizeService,
    DocumentMaterializer,
    PointEnhancementEngine,
    ResumeService,
    RoleService,
)


def get_role_service(
    db: JsonDataStore = Depends(get_db_session),
    agent_manager: AgentManager = Depends(get_agent_manager),
) -> RoleService:
    return RoleService(db=db, agent_manager=agent_manager)


def get_customize_service(
    role_service: RoleService = Depends(get_role_service),
    agent_manager: AgentManager = Depends(get_agent_manager),
) -> CustomizeService:
    ledger = get_job_ledger()
    engine = PointEnhancementEngine(agent_manager, ledger, get_stream_broker())
    return CustomizeService(
        role_service=role_service,
        resume_service=ResumeService(agent_manager),
        ledger=ledger,
        engine=engine,
        spawn=spawn_background,
    )


def get_materializer() -> DocumentMaterializer:
    return DocumentMaterializer(get_job_ledger())


async def read_pdf_upload(upload: UploadFile, max_bytes: int, label: str) -> bytes:
    """Read an uploaded PDF, rejecting other content types and oversized files with 400."""
    if upload.content_type != "application/pdf":
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{label} upload error: Only PDF files are allowed.",
        )
    file_bytes = await upload.read(max_bytes + 1)
    if len(file_bytes) > max_bytes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{label} upload error: File too large (limit {max_bytes // (1024 * 1024)} MB).",
        )
    if not file_bytes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{label} upload error: File is empty.",
        )
    return file_bytes
