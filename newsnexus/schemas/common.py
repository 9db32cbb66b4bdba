"""Shared response envelopes and the sanitizing request base model."""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from newsnexus.utils.sanitize import deep_sanitize


class SanitizedModel(BaseModel):
    """Base for request bodies: input is sanitized before field validation."""

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _sanitize_input(cls, data: Any) -> Any:
        return deep_sanitize(data)


class ResponseMeta(BaseModel):
    """Response metadata."""

    model_config = ConfigDict(populate_by_name=True)

    timestamp: datetime
    request_id: str = Field(..., alias="requestId")
    api_version: str = Field(default="v1", alias="apiVersion")


class ApiResponse(BaseModel):
    """Success envelope: ``{status, message, data, meta}``."""

    status: bool = True
    message: str = "Operation successful"
    data: Dict[str, Any] = Field(default_factory=dict)
    meta: ResponseMeta


class ErrorBody(BaseModel):
    """Machine-readable code plus a human-readable message."""

    model_config = ConfigDict(populate_by_name=True)

    code: str = Field(..., examples=["NOT_FOUND"])
    message: str
    details: Optional[Any] = None
    status: int = Field(..., examples=[404])
    request_id: Optional[str] = Field(default=None, alias="requestId")


class ErrorResponse(BaseModel):
    error: ErrorBody


class HealthCheckResponse(BaseModel):
    """Health check response model.

    Attributes:
        status: Service status
        version: Application version
        service: Service name
        database: Database health details
    """

    status: str = Field(
        default="healthy",
        description="Service health status",
        examples=["healthy", "degraded"],
    )
    version: str = Field(..., description="Application version", examples=["0.1.0"])
    service: str = Field(..., description="Service name", examples=["NewsNexus API"])
    database: Dict[str, Any] = Field(default_factory=dict, description="Database health")
