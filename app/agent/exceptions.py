class ProviderError(RuntimeError):
    """Raised when the underlying provider fails for any reason other than a block."""


class GatewayBlockedError(ProviderError):
    """Raised when the provider returns zero candidates for a prompt."""

    def __init__(self, block_reason: str | None = None):
        self.block_reason = block_reason or "No candidates"
        super().__init__(f"Request blocked by safety settings: {self.block_reason}")


class GatewayEmptyError(ProviderError):
    """Raised when candidates exist but carry no usable text."""

    def __init__(self, message: str = "Provider returned empty content."):
        super().__init__(message)
