from .base import Provider
from .genai import GenAIProvider

__all__ = ["Provider", "GenAIProvider"]
