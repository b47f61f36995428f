"""Schemas related to the relay's OAuth endpoints."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class AuthorizeResponse(BaseModel):
    """Returned to the plugin when it starts a login."""

    model_config = ConfigDict(populate_by_name=True)

    url: str = Field(..., description="Provider login URL carrying the write handle as state.")
    read_key: str = Field(
        ...,
        alias="readKey",
        description="Handle the plugin polls with to collect the tokens.",
    )


__all__ = ["AuthorizeResponse"]
