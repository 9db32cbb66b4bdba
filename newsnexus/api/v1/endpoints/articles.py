"""Article endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from newsnexus.api.v1.dependencies import get_state_assignment_service
from newsnexus.core.auth import get_current_user
from newsnexus.schemas.auth import CurrentUser
from newsnexus.services.state_assignment_service import StateAssignmentService
from newsnexus.utils.responses import create_api_response

router = APIRouter()


@router.get(
    "/{article_id}/details",
    response_model=dict,
    summary="Get article details with human and AI states",
    operation_id="get_article_details",
)
async def get_article_details(
    request: Request,
    article_id: int,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    state_service: Annotated[StateAssignmentService, Depends(get_state_assignment_service)],
) -> dict:
    """Article detail view: content, confirmed states and the AI proposal."""
    detail = await state_service.get_article_detail(article_id)
    return create_api_response(
        data=detail, message="Article details retrieved successfully", request=request
    )
