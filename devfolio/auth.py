"""
Admin authentication.

Sessions belong to the hosted backend: the admin panel signs in there and
sends the session access token as a bearer token. Every authenticated
backend user is an admin of this single-owner site.
"""

import logging
from typing import Any

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from devfolio.backend.client import HostedBackend
from devfolio.dependencies import get_backend
from devfolio.exceptions import MissingTokenError

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_admin(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    backend: HostedBackend = Depends(get_backend),
) -> dict[str, Any]:
    """
    Resolve the bearer token to the signed-in admin.

    Raises:
        MissingTokenError: No bearer token was sent.
        AuthenticationError: The backend rejected the token.
    """
    if credentials is None or not credentials.credentials:
        raise MissingTokenError()

    user = await backend.get_user(credentials.credentials)
    logger.debug(f"Admin request by {user.get('email') or user.get('id')}")
    return user
