from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import uuid4

from fastapi import Request
from fastapi.encoders import jsonable_encoder

from newsnexus.schemas.common import ApiResponse, ErrorBody, ErrorResponse, ResponseMeta


def _request_id(request: Optional[Request]) -> str:
    if request is not None and hasattr(request.state, "request_id"):
        return request.state.request_id
    return str(uuid4())


def create_api_response(
    data: Any,
    message: str = "Operation successful",
    status: bool = True,
    request: Optional[Request] = None,
    api_version: str = "v1",
) -> Dict[str, Any]:
    """Create a standardized API response as a dictionary.

    Lists are wrapped as ``{"items": [...], "count": n}``; pydantic models are
    dumped by alias.
    """
    meta = ResponseMeta(
        timestamp=datetime.now(timezone.utc),
        request_id=_request_id(request),
        api_version=api_version,
    )

    if isinstance(data, dict):
        data_dict = data
    elif hasattr(data, "model_dump"):
        data_dict = data.model_dump(by_alias=True)
    elif isinstance(data, list):
        data_dict = {
            "items": [
                item.model_dump(by_alias=True) if hasattr(item, "model_dump") else item
                for item in data
            ],
            "count": len(data),
        }
    elif data is None:
        data_dict = {}
    else:
        data_dict = {"value": data}

    response = ApiResponse(
        status=status,
        message=message,
        data=jsonable_encoder(data_dict),
        meta=meta,
    )
    return response.model_dump(mode="json", by_alias=True)


def create_error_response(
    code: str,
    message: str,
    status: int,
    details: Any = None,
    request: Optional[Request] = None,
) -> Dict[str, Any]:
    """Create the ``{"error": {...}}`` body returned for every failure."""
    body = ErrorResponse(
        error=ErrorBody(
            code=code,
            message=message,
            details=jsonable_encoder(details) if details is not None else None,
            status=status,
            request_id=_request_id(request),
        )
    )
    return body.model_dump(mode="json", by_alias=True)
