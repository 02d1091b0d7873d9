import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, Response, StreamingResponse

from app.core import settings
from app.core.runtime import get_stream_broker
from app.schemas.pydantic import GenerateDocumentRequest
from app.services import (
    CustomizeService,
    DocumentMaterializer,
    EventStreamBroker,
    ExtractionError,
    JobDescriptionNotFoundError,
    JobDescriptionNotReadyError,
    JobNotFoundError,
    JobNotReadyError,
    RoleNotFoundError,
    StructuringError,
    UpstreamFailureError,
)
from ...dependencies import get_customize_service, get_materializer, read_pdf_upload

logger = logging.getLogger(__name__)

customize_router = APIRouter()

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


@customize_router.post("/customize-resume", status_code=status.HTTP_202_ACCEPTED)
async def customize_resume(
    resume_pdf: UploadFile | None = File(None, alias="resumePdf"),
    role_id: str | None = Form(None, alias="roleId"),
    jd_id: str | None = Form(None, alias="jdId"),
    service: CustomizeService = Depends(get_customize_service),
):
    """
    Start a customization job: returns 202 with the job id once the resume is
    parsed and structured; results arrive on the job's stream.
    """
    if resume_pdf is None:
        raise HTTPException(status_code=400, detail="No resume PDF file uploaded or file rejected.")
    resume_bytes = await read_pdf_upload(resume_pdf, settings.RESUME_MAX_UPLOAD_BYTES, "Resume")

    try:
        response = await service.create_job(resume_bytes, role_id=role_id or None, jd_id=jd_id or None)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (RoleNotFoundError, JobDescriptionNotFoundError) as e:
        target = "role" if isinstance(e, RoleNotFoundError) else "JD"
        raise HTTPException(status_code=404, detail=f"Target {target} not found.")
    except JobDescriptionNotReadyError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (ExtractionError, StructuringError) as e:
        logger.error(f"Error during initial setup for resume customization: {e}")
        raise HTTPException(
            status_code=500, detail=f"Failed to start resume customization: {e}"
        )

    return JSONResponse(
        status_code=status.HTTP_202_ACCEPTED,
        content=response.model_dump(by_alias=True),
    )


@customize_router.get("/customize-stream/{job_id}")
async def customize_stream(job_id: str, broker: EventStreamBroker = Depends(get_stream_broker)):
    subscription = broker.subscribe(job_id)

    async def event_stream():
        try:
            async for event in subscription:
                yield event.to_sse()
        finally:
            # also runs when the client disconnects mid-stream
            broker.unsubscribe(job_id, subscription)

    return StreamingResponse(event_stream(), media_type="text/event-stream", headers=SSE_HEADERS)


@customize_router.post("/generate-edited-pdf")
async def generate_edited_pdf(
    request: GenerateDocumentRequest,
    materializer: DocumentMaterializer = Depends(get_materializer),
):
    if not request.job_id or request.selections is None:
        raise HTTPException(status_code=400, detail="Job ID and selections are required.")

    try:
        pdf_bytes = await run_in_threadpool(materializer.materialize, request.job_id, request.selections)
    except JobNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except JobNotReadyError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UpstreamFailureError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": 'attachment; filename="structured_resume.pdf"'},
    )
