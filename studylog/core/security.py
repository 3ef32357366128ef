"""
Identity boundary.

Token issuance lives elsewhere; this module only verifies the bearer
token and hands the integer `sub` claim to the core as the owner id.
"""
import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from studylog.core.config import settings
from studylog.core.errors import AuthenticationError

bearer_scheme = HTTPBearer(auto_error=False)


def decode_owner_id(token: str) -> int:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except jwt.PyJWTError as exc:
        raise AuthenticationError(f"Invalid token: {exc}") from exc

    sub = payload.get("sub")
    try:
        owner_id = int(sub)
    except (TypeError, ValueError) as exc:
        raise AuthenticationError("Token subject is not a user id.") from exc
    if owner_id <= 0:
        raise AuthenticationError("Token subject is not a user id.")
    return owner_id


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> int:
    """FastAPI dependency — verified owner id of the caller."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationError()
    return decode_owner_id(credentials.credentials)
