import logging

from fastapi import APIRouter, Depends, HTTPException

from app.agent import AgentManager, GatewayBlockedError, GatewayEmptyError, ProviderError
from app.core.runtime import get_agent_manager
from app.schemas.pydantic import SuggestRequest, SuggestResponse
from app.services import suggest_alternatives

logger = logging.getLogger(__name__)

suggest_router = APIRouter()


@suggest_router.post("/suggest", response_model=SuggestResponse)
async def suggest(request: SuggestRequest, agent_manager: AgentManager = Depends(get_agent_manager)):
    point = request.point
    if not point or not point.strip():
        raise HTTPException(status_code=400, detail='Invalid or missing "point" in request body.')

    logger.info(f"Received suggestion request for point: {point[:50]!r}")
    try:
        suggestions = await suggest_alternatives(agent_manager, point)
    except GatewayBlockedError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except GatewayEmptyError:
        raise HTTPException(status_code=500, detail="API returned empty content.")
    except ProviderError as e:
        raise HTTPException(status_code=500, detail=f"Gemini API request failed: {e}")
    return SuggestResponse(suggestions=suggestions)
