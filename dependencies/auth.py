from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from pydantic import BaseModel

from core.config import settings
from core.logging_config import logger


bearer_scheme = HTTPBearer(auto_error=False)


# ============================================================
# Current User Model (identity carried by the access token)
# ============================================================
class CurrentUser(BaseModel):
    id: str
    email: Optional[str] = None
    role: str

    # Property management company the user works in / belongs to.
    # None for platform admins.
    tenant_id: Optional[str] = None


# ============================================================
# AUTH DECODING (HS256 JWT issued by the identity service)
# ============================================================
def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentUser:

    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired authentication token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        raise unauthorized

    if not settings.JWT_SECRET_KEY:
        logger.error("JWT_SECRET_KEY is not configured")
        raise HTTPException(500, "Authentication not configured")

    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except JWTError:
        raise unauthorized

    user_id = payload.get("sub")
    role = payload.get("role")
    if not user_id or not isinstance(role, str):
        raise unauthorized

    # Unknown roles are kept as-is: they simply hold no permissions
    return CurrentUser(
        id=str(user_id),
        email=payload.get("email"),
        role=role,
        tenant_id=payload.get("tenant_id"),
    )


# ============================================================
# OPTIONAL AUTHENTICATION (public zone endpoints)
# ============================================================
def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[CurrentUser]:
    """
    Returns CurrentUser if a valid token is provided, None otherwise.
    Does not raise when the token is missing or invalid.
    """
    if not credentials:
        return None

    try:
        return get_current_user(credentials)
    except HTTPException:
        return None
