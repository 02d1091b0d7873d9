from .manager import AgentManager
from .exceptions import GatewayBlockedError, GatewayEmptyError, ProviderError

__all__ = [
    "AgentManager",
    "GatewayBlockedError",
    "GatewayEmptyError",
    "ProviderError",
]
