"""
Access token verification.
"""
import jwt
from fastapi import HTTPException, status
from pydantic import ValidationError

from app.core import config
from app.features.staff.schemas import Actor


def verify_jwt_token(token: str) -> dict:
    """
    Verify an access token and return its payload.

    Args:
        token: JWT token from Authorization header

    Returns:
        Decoded JWT payload containing staff information

    Raises:
        HTTPException: If token is invalid or expired
    """
    try:
        return jwt.decode(
            token,
            config.JWT_SECRET,
            algorithms=[config.JWT_ALGORITHM],
            options={"verify_exp": True},
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except jwt.InvalidTokenError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )


def actor_from_payload(payload: dict) -> Actor:
    """Build the Actor from token claims (staff_id, position, username)."""
    try:
        return Actor(
            staff_id=payload.get("staff_id"),
            position=payload.get("position"),
            username=payload.get("username"),
        )
    except ValidationError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
            headers={"WWW-Authenticate": "Bearer"},
        )


def create_access_token(staff_id: int, position: str, username: str | None = None, **claims) -> str:
    """Sign a token with the configured secret. Used by tests and local tooling."""
    payload = {"staff_id": staff_id, "position": position, "username": username, **claims}
    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)
