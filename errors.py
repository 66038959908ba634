"""Exceptions raised by the search engines and the image host."""

from typing import Optional


class ReverseSearchError(Exception):
    """Base class for every error raised by this package"""


class MissingCredentialError(ReverseSearchError):
    """A required API key was not configured. Raised before any request is sent."""


class InvalidCredentialError(ReverseSearchError):
    """The upstream service rejected the configured API key."""


class InvalidInputKindError(ReverseSearchError, TypeError):
    """The image argument is not one of the accepted shapes."""

    def __init__(self, value, accepted: tuple[str, ...]):
        self.accepted = accepted
        super().__init__(
            f"Invalid image type {type(value).__name__!r}, valid types: {', '.join(accepted)}"
        )


class UpstreamError(ReverseSearchError):
    """Non-success outcome from an upstream service."""

    def __init__(self, status: int, reason: Optional[str] = None):
        self.status = status
        self.reason = reason or ""
        super().__init__(f"{status}. {self.reason}")
