import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.responses import JSONResponse

from app.core.runtime import spawn_background
from app.services import JobDescriptionNotFoundError, RoleService
from ...dependencies import get_role_service

logger = logging.getLogger(__name__)

jds_router = APIRouter()


@jds_router.get("")
async def list_completed_jds(service: RoleService = Depends(get_role_service)):
    return await service.list_completed_jds()


@jds_router.post("/{jd_id}/analyze")
async def analyze_jd(jd_id: str, service: RoleService = Depends(get_role_service)):
    try:
        started, jd = await service.start_analysis(jd_id)
    except JobDescriptionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    if not started:
        return {"message": f"JD analysis already {jd.status.value}.", "jd": jd.to_record()}

    spawn_background(service.perform_analysis(jd_id))
    return JSONResponse(
        status_code=status.HTTP_202_ACCEPTED,
        content={"message": "JD analysis started.", "jd": jd.to_record()},
    )


@jds_router.delete("/{jd_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_jd(jd_id: str, service: RoleService = Depends(get_role_service)):
    try:
        await service.delete_jd(jd_id)
    except JobDescriptionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
