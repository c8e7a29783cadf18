"""
Authentication Endpoints.

Exchanges an email and password for a signed bearer token. Attempts are rate
limited per client IP, and every attempt is written to the audit trail and
feeds the security views.
"""

from fastapi import APIRouter, Depends

from fnb_cost.core.logging_config import get_logger
from fnb_cost.core.models.io.users import LoginRequest, LoginResponse
from fnb_cost.server.services.deps import AuthServiceDep, enforce_login_rate_limit

logger = get_logger(__name__)

router = APIRouter(tags=["auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Log In",
    description="Check an email and password pair, record the attempt in the audit trail and issue a bearer token.",
    response_description="The access token and the authenticated user.",
    responses={
        401: {"description": "Invalid credentials or disabled account"},
        429: {"description": "Too many attempts from this client"},
    },
    dependencies=[Depends(enforce_login_rate_limit)],
)
async def login(credentials: LoginRequest, auth: AuthServiceDep) -> LoginResponse:
    return await auth.login(credentials)
