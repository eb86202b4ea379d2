"""Pydantic models for runtime-service API responses."""

from typing import Literal

from pydantic import BaseModel


class InstanceCreated(BaseModel):
    """Response from the create instance API."""

    instance_id: str


class CallOutcome(BaseModel):
    """Response from the call API."""

    status: Literal["replied", "rejected"]
    reply: str | None = None
    message: str | None = None
