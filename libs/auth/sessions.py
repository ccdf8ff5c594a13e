"""Client for the external identity service's session API.

The storefront never issues sessions; it can only ask the identity service to
revoke one (logout).
"""

import httpx

from libs.common.config import get_settings
from libs.common.logging import get_logger, get_request_id

logger = get_logger(__name__)

_DEFAULT_TIMEOUT = 10.0


async def invalidate_session(token: str, *, timeout: float = _DEFAULT_TIMEOUT) -> bool:
    """Revoke a session at the identity service.

    Returns True if the identity service acknowledged the revocation. Transport
    errors are logged and reported as False: logout clears the cookie either way.
    """
    settings = get_settings()
    headers = {"Authorization": f"Bearer {settings.IDENTITY_SERVICE_API_KEY}"}
    request_id = get_request_id()
    if request_id:
        headers["X-Request-ID"] = request_id

    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.request(
                "DELETE",
                f"{settings.IDENTITY_SERVICE_URL}/sessions",
                headers=headers,
                json={"session_token": token},
            )
    except httpx.RequestError as exc:
        logger.warning("Identity service unreachable during logout: %s", exc)
        return False

    if response.status_code >= 400:
        logger.warning(
            "Identity service refused session invalidation (http %d)",
            response.status_code,
        )
        return False
    return True
