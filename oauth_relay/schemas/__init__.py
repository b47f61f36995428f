"""Public schema exports."""

from .auth import AuthorizeResponse

__all__ = ["AuthorizeResponse"]
