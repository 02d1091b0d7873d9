import logging

from fastapi import APIRouter, status, Depends

from app.core import get_db_session, JsonDataStore

logger = logging.getLogger(__name__)

health_check = APIRouter()


@health_check.get("/ping", tags=["Health check"], status_code=status.HTTP_200_OK)
async def ping(db: JsonDataStore = Depends(get_db_session)):
    """health check endpoint for the role/JD data store"""
    try:
        await db.read()
        db_status = "reachable"
    except RuntimeError:
        logger.error("Data store health check failed", exc_info=True)
        db_status = "unreachable"
    return {"message": "pong", "database": db_status}
