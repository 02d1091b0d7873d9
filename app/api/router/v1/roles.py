import logging

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile, status

from app.core import settings
from app.schemas.pydantic import JdUrlRequest, RoleCreateRequest
from app.services import RoleNotFoundError, RoleService
from ...dependencies import get_role_service, read_pdf_upload

logger = logging.getLogger(__name__)

roles_router = APIRouter()


@roles_router.post("", status_code=status.HTTP_201_CREATED)
async def create_role(request: RoleCreateRequest, service: RoleService = Depends(get_role_service)):
    try:
        role = await service.create_role(request.name)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return role.to_record()


@roles_router.get("")
async def list_roles(service: RoleService = Depends(get_role_service)):
    return [role.to_record() for role in await service.list_roles()]


@roles_router.delete("/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_role(role_id: str, service: RoleService = Depends(get_role_service)):
    try:
        await service.delete_role(role_id)
    except RoleNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@roles_router.get("/{role_id}/jds")
async def list_role_jds(role_id: str, service: RoleService = Depends(get_role_service)):
    try:
        jds = await service.list_role_jds(role_id)
    except RoleNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return [jd.to_record() for jd in jds]


@roles_router.get("/{role_id}/keywords")
async def role_keywords(role_id: str, service: RoleService = Depends(get_role_service)):
    try:
        return await service.keyword_summary(role_id)
    except RoleNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@roles_router.post("/{role_id}/jds/url", status_code=status.HTTP_201_CREATED)
async def add_jd_url(
    role_id: str,
    request: JdUrlRequest,
    service: RoleService = Depends(get_role_service),
):
    try:
        jd = await service.add_jd_url(role_id, request.url)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RoleNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return jd.to_record()


@roles_router.post("/{role_id}/jds/upload", status_code=status.HTTP_201_CREATED)
async def add_jd_pdf(
    role_id: str,
    jd_pdf: UploadFile | None = File(None, alias="jdPdf"),
    service: RoleService = Depends(get_role_service),
):
    if jd_pdf is None:
        raise HTTPException(status_code=400, detail="No PDF file uploaded or file rejected.")
    file_bytes = await read_pdf_upload(jd_pdf, settings.JD_MAX_UPLOAD_BYTES, "File")
    try:
        jd = await service.add_jd_pdf(role_id, file_bytes, jd_pdf.filename)
    except RoleNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return jd.to_record()
