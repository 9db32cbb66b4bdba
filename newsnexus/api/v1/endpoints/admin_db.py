"""Read-only database viewer for administrators."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from newsnexus.api.v1.dependencies import get_admin_service
from newsnexus.core.auth import require_admin
from newsnexus.schemas.auth import CurrentUser
from newsnexus.services.admin_service import AdminService
from newsnexus.utils.responses import create_api_response

router = APIRouter()


@router.get(
    "/table/{table_name}",
    response_model=dict,
    summary="Dump one table",
    operation_id="get_admin_table",
)
async def get_admin_table(
    request: Request,
    table_name: str,
    admin_user: Annotated[CurrentUser, Depends(require_admin)],
    admin_service: Annotated[AdminService, Depends(get_admin_service)],
) -> dict:
    """Return every row of ``table_name`` (model class name, e.g. ``Article``)."""
    rows = await admin_service.get_table(table_name)
    return create_api_response(
        data={"tableName": table_name, "count": len(rows), "rows": rows},
        message=f"Retrieved {len(rows)} rows from {table_name}",
        request=request,
    )
