import logging
from typing import Any

from .exceptions import ProviderError
from .providers.base import Provider
from ..core import settings

logger = logging.getLogger(__name__)


class AgentManager:
    """
    Single entry point for text generation.

    `run(prompt, temperature=..., max_output_tokens=..., json_mode=...)` returns
    the generated text. The concrete provider is created lazily from settings,
    unless one is injected (tests pass scripted providers here).
    """

    def __init__(self, provider: Provider | None = None, provider_name: str | None = None):
        self._provider = provider
        self.provider_name = (provider_name or settings.LLM_PROVIDER or "genai").lower()

    def _get_provider(self) -> Provider:
        if self._provider is not None:
            return self._provider
        if self.provider_name == "genai":
            from .providers.genai import GenAIProvider

            self._provider = GenAIProvider()
            return self._provider
        raise ProviderError(f"Unsupported LLM_PROVIDER='{self.provider_name}'")

    async def run(self, prompt: str, **generation_args: Any) -> str:
        provider = self._get_provider()
        logger.debug(
            f"AgentManager - sending prompt ({len(prompt)} chars) with options {generation_args}"
        )
        return await provider(prompt, **generation_args)
