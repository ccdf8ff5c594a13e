"""Account router: session user lookup and logout."""

from typing import Optional

from fastapi import APIRouter, Depends, Response
from libs.auth.dependencies import get_current_user, get_session_token
from libs.auth.models import AuthUser
from libs.auth.sessions import invalidate_session
from libs.common.config import get_settings
from services.storefront_service.schemas import SuccessResponse

router = APIRouter(tags=["account"])


@router.get("/users/me", response_model=AuthUser, response_model_by_alias=False)
async def get_me(current_user: AuthUser = Depends(get_current_user)):
    return current_user


@router.get("/logout", response_model=SuccessResponse)
async def logout(
    response: Response,
    token: Optional[str] = Depends(get_session_token),
):
    """Revoke the session at the identity service and drop the cookie."""
    if token:
        await invalidate_session(token)
    response.delete_cookie(get_settings().SESSION_COOKIE_NAME, path="/")
    return SuccessResponse()
