from datetime import datetime, timedelta, timezone
from typing import Dict, Any, Optional
import logging
import os

from fastapi import Depends, HTTPException, status, Request
from jose import jwt
from jose.exceptions import JWTError
from dotenv import load_dotenv

from utils.rbac import PermissionMatrix, get_permission_matrix

load_dotenv()

logger = logging.getLogger("auth")

# === Token Configuration ===
# Tokens are issued by the identity provider that fronts this API and signed
# with a shared secret. Override these in the environment for any real deployment.
SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me-in-production-0b1f4c2e9a")
ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Sign a token carrying ``sub``, ``role`` and, for CONTACT users, ``contact_id``."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def get_current_user(request: Request) -> Dict[str, Any]:
    """
    FastAPI dependency to validate the bearer JWT from the Authorization header.

    Usage:
        @router.get("/secure-data")
        def secure_endpoint(user: dict = Depends(get_current_user)):
            return {"role": user["role"]}
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header is missing",
        )

    # The token is expected to be in the format "Bearer <token>"
    parts = auth_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
        )

    token = parts[1]
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired"
        )
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Token validation failed: {e}"
        )

    if not payload.get("sub") or not payload.get("role"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token is missing subject or role claims",
        )
    return payload


def get_user_identifier(user: Dict[str, Any]) -> str:
    """Name recorded in created_by/updated_by and the audit log."""
    return user.get("email") or user.get("sub") or "unknown"


def require_permission(*permissions: str):
    """Dependency factory: the caller's role must hold at least one of ``permissions``."""
    def _checker(
        user: Dict[str, Any] = Depends(get_current_user),
        matrix: PermissionMatrix = Depends(get_permission_matrix),
    ) -> Dict[str, Any]:
        if not matrix.has_any_permission(user["role"], permissions):
            logger.warning(f"User {get_user_identifier(user)} with role {user['role']} denied; needs one of {permissions}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You do not have permission to perform this action",
            )
        return user
    return _checker


def own_contact_scope(user: Dict[str, Any], matrix: PermissionMatrix, view_all: str) -> Optional[int]:
    """Contact id a listing must be restricted to, or None for an unrestricted view.

    Users lacking ``view_all`` only hold the matching ``*_view_own`` permission
    (enforced by ``require_permission``) and are limited to their own contact.
    """
    if matrix.has_permission(user["role"], view_all):
        return None
    contact_id = user.get("contact_id")
    if contact_id is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Token is not linked to a contact",
        )
    return int(contact_id)
