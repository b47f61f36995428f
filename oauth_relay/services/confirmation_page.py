"""Render the page shown to the user after the provider redirects back."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"


@lru_cache()
def _environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(_TEMPLATE_DIR)),
        autoescape=select_autoescape(["html"]),
    )


def render_confirmation_page(message: str, title: str = "Authentication complete") -> str:
    """Return the confirmation HTML with ``message`` escaped into the body."""
    template = _environment().get_template("confirmation.html")
    return template.render(title=title, message=message)


__all__ = ["render_confirmation_page"]
