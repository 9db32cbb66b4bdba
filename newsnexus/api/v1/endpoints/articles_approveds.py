"""Human approval of AI-drafted report content."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from newsnexus.api.v1.dependencies import get_content_approval_service
from newsnexus.core.auth import get_current_user
from newsnexus.schemas.auth import CurrentUser
from newsnexus.services.content_approval_service import ContentApprovalService
from newsnexus.utils.logging import get_logger
from newsnexus.utils.responses import create_api_response

LOGGER = get_logger(__name__)

router = APIRouter()


@router.post(
    "/human-approve/{article_id}",
    response_model=dict,
    summary="Approve the AI-drafted report text of an article",
    operation_id="human_approve_article",
)
async def human_approve_article(
    request: Request,
    article_id: int,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    approval_service: Annotated[ContentApprovalService, Depends(get_content_approval_service)],
) -> dict:
    """Copy the AI draft into the human approval table as the current user.

    Raises:
        404 NOT_FOUND: No AI draft for the article
        400 AMBIGUOUS_DATA: Several AI drafts for the article
        409 ALREADY_APPROVED: A human already approved the article
    """
    result = await approval_service.approve_content(article_id, current_user.id)
    return create_api_response(data=result, message=result["message"], request=request)
