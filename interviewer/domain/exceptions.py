"""Error taxonomy for provider calls and configuration.

Parsing degradations and policy short-circuits (e.g. evaluating zero
answers) are handled locally and never raised.
"""

from typing import Optional


class InterviewerError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(InterviewerError):
    """Invalid or missing configuration. Fatal to the client being built."""


class TransportError(InterviewerError):
    """Network failure or timeout while talking to a vendor."""

    def __init__(self, message: str, provider: str = ""):
        self.provider = provider
        super().__init__(message)


class ProviderError(InterviewerError):
    """The vendor answered, but rejected the call or signalled an API error."""

    def __init__(self, message: str, status_code: Optional[int] = None, provider: str = ""):
        self.message = message
        self.status_code = status_code
        self.provider = provider
        super().__init__(message)


class StreamingNotSupportedError(ProviderError):
    """Raised by adapters that have no streaming implementation."""

    def __init__(self, provider: str):
        super().__init__(f"streaming not yet implemented for {provider} provider", provider=provider)


class MaxRetryError(InterviewerError):
    """Exception raised when max retries are exceeded."""

    def __init__(self, original_exception: Exception, attempts: int):
        self.original_exception = original_exception
        self.attempts = attempts
        super().__init__(f"AI request failed after {attempts} attempts: {original_exception}")
