import re
import json
import logging

from pydantic import ValidationError
from typing import Any, Dict, List, Optional, Tuple

from app.agent import AgentManager, ProviderError
from app.core import settings
from app.prompt import prompt_factory
from app.schemas.json import json_schema_factory
from app.schemas.pydantic import StructuredResumeModel
from .exceptions import StructuringError

logger = logging.getLogger(__name__)

_FENCED_JSON = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")

# Accomplishments of this length or shorter (after trimming) are not enhanced.
MIN_POINT_LENGTH = 6


def _parse_direct(text: str) -> Optional[Dict[str, Any]]:
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


def _parse_fenced(text: str) -> Optional[Dict[str, Any]]:
    match = _FENCED_JSON.search(text)
    if not match:
        return None
    return _parse_direct(match.group(1))


def parse_structured_json(text: str) -> Dict[str, Any]:
    """
    Two-stage parse of a model response: the whole text as JSON, then the
    first fenced code block. Raises `StructuringError` when both fail.
    """
    for strategy in (_parse_direct, _parse_fenced):
        parsed = strategy(text)
        if parsed is not None:
            if strategy is _parse_fenced:
                logger.info("Parsed structured resume JSON from code block fallback.")
            return parsed
    logger.error(f"Raw AI response for structuring: {text[:500]!r}")
    raise StructuringError("AI response for structured resume was not valid JSON.")


def flatten_points(resume: StructuredResumeModel) -> List[str]:
    """
    All accomplishments in document order (entry order, then bullet order),
    skipping blank or too-short strings. Points are returned untrimmed so they
    still match the stored document when selections are applied.
    """
    points: List[str] = []
    for entry in resume.experience:
        points.extend(
            acc for acc in entry.accomplishments if len(acc.strip()) >= MIN_POINT_LENGTH
        )
    return points


class ResumeService:
    def __init__(self, agent_manager: AgentManager | None = None):
        self.json_agent_manager = agent_manager or AgentManager()

    async def structure_resume(self, resume_text: str) -> Tuple[StructuredResumeModel, List[str]]:
        """
        Convert raw resume text into a `StructuredResumeModel` and the ordered
        list of accomplishment points to enhance.

        Any gateway failure here is fatal and surfaces as `StructuringError`.
        """
        prompt_template = prompt_factory.get("structured_resume")
        prompt = prompt_template.format(
            json.dumps(json_schema_factory.get("structured_resume")),
            resume_text[: settings.MAX_PROMPT_TEXT_CHARS],
        )
        try:
            raw_output = await self.json_agent_manager.run(
                prompt=prompt, temperature=0.2, json_mode=True
            )
        except ProviderError as e:
            raise StructuringError(f"AI resume structuring blocked or failed. {e}") from e

        structured = self._validate(parse_structured_json(raw_output))
        points = flatten_points(structured)
        logger.info(
            f"Structured resume for {structured.name}: "
            f"{len(structured.experience)} experience entries, {len(points)} points"
        )
        if not points:
            logger.warning("No accomplishment points found in the structured resume data.")
        return structured, points

    @staticmethod
    def _validate(raw: Dict[str, Any]) -> StructuredResumeModel:
        try:
            return StructuredResumeModel.model_validate(raw)
        except ValidationError as e:
            error_details = []
            for error in e.errors():
                field = " -> ".join(str(loc) for loc in error["loc"])
                error_details.append(f"{field}: {error['msg']}")
            logger.info(f"Validation error details: {'; '.join(error_details)}")
            raise StructuringError(
                "AI returned invalid or incomplete JSON structure for the resume. "
                + "; ".join(error_details)
            ) from e
