"""Marketing waitlist endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from ..deps.services import get_waitlist_service
from ..schemas import WaitlistRequest, WaitlistResponse
from ..services.rate_limiter import client_ip
from ..services.waitlist_service import WaitlistService

router = APIRouter(prefix="/v1", tags=["waitlist"])

# The body is read by hand so the limiter sees every request, parseable or not.
_REQUEST_BODY = {
    "requestBody": {
        "required": True,
        "content": {
            "application/json": {"schema": WaitlistRequest.model_json_schema(by_alias=True)}
        },
    }
}


@router.post(
    "/waitlist",
    response_model=WaitlistResponse,
    response_model_exclude_none=True,
    openapi_extra=_REQUEST_BODY,
)
async def join_waitlist(
    request: Request,
    service: WaitlistService = Depends(get_waitlist_service),
):
    try:
        raw = await request.json()
    except ValueError:
        raw = None
    await service.submit(raw, client_ip(request))
    return WaitlistResponse(success=True)
