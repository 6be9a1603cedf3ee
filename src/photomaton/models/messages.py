"""
Wire Message Schemas
====================

Pydantic models for the stylize request/response shape spoken between
the ProxyStylizeClient and the proxy server.

Request Contract:
    {
        "image_base64": "<base64 image>",
        "mime_type": "image/jpeg",
        "instruction": "Transform this image into a Watercolor Painting style..."
    }

Response Contract:
    {
        "image_base64": "<base64 image>" | null,
        "mime_type": "image/png" | null,
        "text": "advisory text" | null
    }

A response with no image_base64 is a NoOutput result, not an error.
Errors are reported as non-2xx responses with {"error": "<message>"}.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class GenerateRequest(BaseModel):
    """
    Stylize request forwarded through the proxy.

    Attributes:
        image_base64: Base64-encoded source frame
        mime_type: MIME type of the source frame
        instruction: Style prompt or free-form edit text
    """

    image_base64: str = Field(
        ...,
        min_length=1,
        description="Base64-encoded source frame",
    )

    mime_type: str = Field(
        default="image/jpeg",
        description="MIME type of the source frame",
    )

    instruction: str = Field(
        ...,
        min_length=1,
        description="Style prompt or free-form edit text",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "image_base64": "/9j/4AAQSkZJRg...",
                "mime_type": "image/jpeg",
                "instruction": "Transform this image into a Watercolor Painting style.",
            }
        }
    )


class GenerateResponse(BaseModel):
    """Stylize response; image fields are absent for NoOutput."""

    image_base64: Optional[str] = Field(
        default=None,
        description="Base64-encoded output frame",
    )

    mime_type: Optional[str] = Field(
        default=None,
        description="MIME type of the output frame",
    )

    text: Optional[str] = Field(
        default=None,
        description="Advisory text returned by the model",
    )


class HealthResponse(BaseModel):
    """Static service descriptor returned by the liveness check."""

    service: str
    status: str
    version: str
