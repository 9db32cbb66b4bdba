"""State-assigner endpoints: list AI state proposals and record human verdicts."""

from typing import Annotated, Optional

from fastapi import APIRouter, Body, Depends, Request

from newsnexus.api.v1.dependencies import get_reporting_service, get_state_assignment_service
from newsnexus.core.auth import get_current_user
from newsnexus.schemas.auth import CurrentUser
from newsnexus.schemas.state_assignment import HumanVerifyRequest, StateAssignerRequest
from newsnexus.services.reporting_service import ReportingService
from newsnexus.services.state_assignment_service import APPROVE, StateAssignmentService
from newsnexus.utils.logging import get_logger
from newsnexus.utils.responses import create_api_response

LOGGER = get_logger(__name__)

router = APIRouter()


@router.post(
    "/",
    response_model=dict,
    summary="List articles with AI state assignments",
    operation_id="list_state_assignments",
)
async def list_state_assignments(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    reporting_service: Annotated[ReportingService, Depends(get_reporting_service)],
    body: Annotated[Optional[StateAssignerRequest], Body()] = None,
) -> dict:
    """List articles joined with their AI state proposals.

    ``includeNullState=true`` returns only proposals where the AI found no
    state; otherwise only proposals with a state are returned.
    """
    include_null_state = bool(body.include_null_state) if body else False
    LOGGER.info(f"Request parameters - includeNullState: {include_null_state}")

    articles = await reporting_service.list_articles_with_state_assignments(include_null_state)

    return create_api_response(
        data={"count": len(articles), "articles": articles},
        message="Successfully retrieved articles with state assignments",
        request=request,
    )


@router.post(
    "/human-verify/{article_id}",
    response_model=dict,
    summary="Approve or reject an AI-assigned state",
    operation_id="human_verify_state",
)
async def human_verify_state(
    request: Request,
    article_id: int,
    body: HumanVerifyRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    state_service: Annotated[StateAssignmentService, Depends(get_state_assignment_service)],
) -> dict:
    """Record a human verdict on an AI state proposal.

    Returns:
        The article detail view after the change

    Raises:
        404 NOT_FOUND: No proposal for the pair
        400 AMBIGUOUS_DATA: Several proposals for the pair
        409 CONFLICT: Approving an already confirmed pair
    """
    LOGGER.info(
        f"articleId: {article_id}, action: {body.action}, stateId: {body.state_id}",
        extra={"user_id": current_user.id},
    )

    if body.action == APPROVE:
        detail = await state_service.approve_state(article_id, body.state_id)
        message = "Article state approved successfully"
    else:
        detail = await state_service.reject_state(article_id, body.state_id)
        message = "Article state rejected successfully"

    return create_api_response(data=detail, message=message, request=request)
