import os
import logging

import google.generativeai as genai
from google.generativeai.types import HarmBlockThreshold, HarmCategory
from typing import Any, Dict
from fastapi.concurrency import run_in_threadpool

from ..exceptions import GatewayBlockedError, GatewayEmptyError, ProviderError
from .base import Provider
from ...core import settings

logger = logging.getLogger(__name__)

# Medium-and-above content is blocked in every harm category we care about.
SAFETY_SETTINGS = {
    HarmCategory.HARM_CATEGORY_HARASSMENT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
    HarmCategory.HARM_CATEGORY_HATE_SPEECH: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
    HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
    HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
}

_ALLOWED_KEYS = {
    "temperature",
    "top_p",
    "top_k",
    "max_output_tokens",
}


class GenAIProvider(Provider):
    """
    Provider for Google Generative AI (Gemini).

    Every call carries the fixed safety configuration above. A response with
    no candidates raises `GatewayBlockedError`; a response whose text is empty
    or whitespace raises `GatewayEmptyError`. Anything else the SDK raises is
    wrapped in `ProviderError`.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model_name: str = settings.LL_MODEL,
        opts: Dict[str, Any] | None = None,
    ):
        if opts is None:
            opts = {
                "temperature": settings.LLM_TEMPERATURE,
                "top_k": settings.LLM_TOP_K,
                "top_p": settings.LLM_TOP_P,
                "max_output_tokens": settings.LLM_MAX_OUTPUT_TOKENS,
            }
        api_key = api_key or settings.LLM_API_KEY or os.getenv("GOOGLE_API_KEY")
        if not api_key:
            raise ProviderError("Google Generative AI API key is missing")

        genai.configure(api_key=api_key)
        self.model = genai.GenerativeModel(model_name)
        self.model_name = model_name
        self.opts = opts

    def _build_generation_config(self, options: Dict[str, Any]) -> Dict[str, Any]:
        generation_config = {}
        for key in _ALLOWED_KEYS:
            value = self.opts.get(key)
            if value is not None:
                generation_config[key] = value
        for key in _ALLOWED_KEYS:
            if key in options and options[key] is not None:
                generation_config[key] = options[key]
        if options.get("json_mode"):
            generation_config["response_mime_type"] = "application/json"
        return generation_config

    @staticmethod
    def _block_reason(response: Any) -> str | None:
        feedback = getattr(response, "prompt_feedback", None)
        reason = getattr(feedback, "block_reason", None)
        if not reason:
            return None
        return getattr(reason, "name", None) or str(reason)

    @staticmethod
    def _response_text(response: Any) -> str:
        # `response.text` raises ValueError when the first candidate has no parts
        # (e.g. finish_reason=SAFETY), which we report as empty content.
        try:
            return response.text or ""
        except ValueError:
            return ""

    def _generate_sync(self, prompt: str, options: Dict[str, Any]) -> str:
        generation_config = self._build_generation_config(options)
        try:
            response = self.model.generate_content(
                prompt,
                generation_config=genai.types.GenerationConfig(**generation_config),
                safety_settings=SAFETY_SETTINGS,
            )
        except Exception as e:
            raise ProviderError(f"Google Generative AI - error generating response: {e}") from e

        if not getattr(response, "candidates", None):
            reason = self._block_reason(response)
            logger.warning(f"GenAIProvider - request blocked. Reason: {reason or 'No candidates'}")
            raise GatewayBlockedError(reason)

        text = self._response_text(response)
        if not text.strip():
            logger.warning("GenAIProvider - candidates returned but text is empty")
            raise GatewayEmptyError()
        return text

    async def __call__(self, prompt: str, **generation_args: Any) -> str:
        myopts = {
            k: v
            for k, v in generation_args.items()
            if (k in _ALLOWED_KEYS or k == "json_mode") and v is not None
        }
        return await run_in_threadpool(self._generate_sync, prompt, myopts)
