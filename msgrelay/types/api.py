"""
API request and response type definitions.
"""

from pydantic import BaseModel, ConfigDict, Field


class EnqueueRequest(BaseModel):
    """JSON body accepted by POST /enqueue."""

    model_config = ConfigDict(strict=True)

    message: str = Field(default="", description="Message text to enqueue")


class EnqueueResponse(BaseModel):
    """Response body after a message was accepted."""

    enqueued: bool = True
    queue: str
    message: str


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
