from . import (
    jd_analysis,
    jd_keywords,
    point_alternatives,
    point_relevance,
    point_suggestion,
    structured_resume,
)


class PromptFactory:
    def __init__(self):
        self._prompts = {
            "structured_resume": structured_resume.PROMPT,
            "point_relevance": point_relevance.PROMPT,
            "point_suggestion_relevant": point_suggestion.RELEVANT_PROMPT,
            "point_suggestion_general": point_suggestion.GENERAL_PROMPT,
            "point_alternatives": point_alternatives.PROMPT,
            "jd_analysis": jd_analysis.PROMPT,
            "jd_keywords": jd_keywords.PROMPT,
        }

    def get(self, name: str) -> str:
        try:
            return self._prompts[name]
        except KeyError:
            raise ValueError(f"Unknown prompt: {name}") from None


prompt_factory = PromptFactory()

__all__ = ["prompt_factory"]
