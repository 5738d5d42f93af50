"""
Bearer-token authentication.

Sessions are managed by the hosted auth provider. It hands clients a
signed, time-limited token whose payload carries the user id; this module
only verifies the signature and age.
"""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from itsdangerous import BadSignature, URLSafeTimedSerializer

from magicmanager.config import settings
from magicmanager.models.errors import UnauthorizedError

TOKEN_SALT = "magicmanager-session"

bearer_scheme = HTTPBearer(auto_error=False)


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(settings.auth_secret_key, salt=TOKEN_SALT)


def issue_access_token(user_id: str) -> str:
    """Sign a session token for a user."""
    return _serializer().dumps({"sub": user_id})


def verify_access_token(token: str) -> str:
    """
    Verify a session token and return its user id.

    Raises:
        UnauthorizedError: If the token is malformed, tampered with, or expired
    """
    try:
        payload = _serializer().loads(token, max_age=settings.auth_token_max_age)
    except BadSignature as e:  # includes SignatureExpired
        raise UnauthorizedError() from e

    user_id = payload.get("sub") if isinstance(payload, dict) else None
    if not user_id or not isinstance(user_id, str):
        raise UnauthorizedError()
    return user_id


async def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> str:
    """
    Dependency that resolves the requesting user.

    Usage in FastAPI:
        @router.get("/items")
        async def items(user_id: Annotated[str, Depends(get_current_user_id)]):
            ...
    """
    if credentials is None:
        raise UnauthorizedError()
    return verify_access_token(credentials.credentials)


CurrentUser = Annotated[str, Depends(get_current_user_id)]
