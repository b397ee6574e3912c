"""Error types raised along the chat pipeline."""


class ChatServiceError(Exception):
    """Base class for chat pipeline failures."""


class MessageValidationError(ChatServiceError):
    """Inbound message missing or empty after trimming."""


class RateLimitExceeded(ChatServiceError):
    """Caller exceeded the request cap for the current window."""


class StoreError(ChatServiceError):
    """Query or write against the conversation store failed."""


class ProviderError(ChatServiceError):
    """Completion call failed or returned a malformed response."""
