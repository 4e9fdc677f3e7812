"""Pydantic schema for the uniform error envelope."""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Body of every non-2xx response."""

    statusCode: int
    timestamp: str = Field(description="ISO-8601 UTC time of the failure")
    path: str
    method: str
    message: str | list[str]
    error: str
