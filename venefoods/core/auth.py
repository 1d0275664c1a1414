# venefoods/core/auth.py
from typing import Any

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError

from venefoods.core.config import get_settings
from venefoods.schemas.admin import AdminPrincipal

# HTTP Bearer scheme:
# - auto_error=False => missing Authorization header will NOT raise immediately
#   so we can answer with our own 401 message.
bearer_scheme = HTTPBearer(auto_error=False)


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and verify a Supabase access token (JWT).

    Verification:
      - signature (HS256 using SUPABASE_JWT_SECRET)
      - expiration time (exp)
      - audience is NOT verified (Supabase 'aud' may vary)

    Raises:
        HTTPException(401): if token is invalid/expired.
    """
    settings = get_settings()
    try:
        return jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.SUPABASE_JWT_ALG],
            options={"verify_aud": False},
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )


def get_current_operator(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> AdminPrincipal | None:
    """
    Resolve the signed-in back-office operator from a Supabase JWT.

    Flow:
      1. No Authorization header => anonymous => None.
      2. Decode JWT => extract 'sub' and 'email'.

    Raises:
        HTTPException(401): if token is malformed or missing required claims.
    """
    if credentials is None:
        return None

    payload = decode_access_token(credentials.credentials)
    sub = payload.get("sub")
    email = payload.get("email")

    if not sub or not email:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token missing sub/email",
        )

    return AdminPrincipal(id=sub, email=email)


def require_admin(
    operator: AdminPrincipal | None = Depends(get_current_operator),
) -> AdminPrincipal:
    """
    Gate in front of the back-office.

    - Anonymous => 401 (the dashboard redirects to its login page).
    - If ADMIN_EMAILS is configured, the email must be listed => else 403.
    - If ADMIN_EMAILS is empty, any Supabase-authenticated operator passes.
    """
    if operator is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )

    allowed = {e.strip().lower() for e in get_settings().ADMIN_EMAILS if e.strip()}
    if allowed and operator.email.lower() not in allowed:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return operator
