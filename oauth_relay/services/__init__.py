"""Service layer exports."""

from .confirmation_page import render_confirmation_page
from .correlation import AuthorizationStart, CorrelationService
from .handles import generate_handle
from .token_cipher import TokenCipherService

__all__ = [
    "AuthorizationStart",
    "CorrelationService",
    "TokenCipherService",
    "generate_handle",
    "render_confirmation_page",
]
