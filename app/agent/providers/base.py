from abc import ABC, abstractmethod
from typing import Any


class Provider(ABC):
    """
    Abstract base for text generation providers.

    Implementations must return the generated text, or raise one of the
    errors from `app.agent.exceptions`.
    """

    @abstractmethod
    async def __call__(self, prompt: str, **generation_args: Any) -> str: ...
