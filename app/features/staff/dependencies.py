"""
FastAPI dependencies for authentication and position checks.
"""
from typing import Annotated
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.core.vocabulary import CONFIG_MANAGERS, plain
from app.features.staff.auth import verify_jwt_token, actor_from_payload
from app.features.staff.schemas import Actor


security = HTTPBearer()


async def get_current_staff(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
) -> Actor:
    """
    Get the authenticated staff member from the bearer token.

    Usage:
        @router.get("/me")
        async def get_me(actor: Actor = Depends(get_current_staff)):
            return actor
    """
    payload = verify_jwt_token(credentials.credentials)
    return actor_from_payload(payload)


def require_positions(*positions: str):
    """
    Dependency factory that only lets the given positions through.

    Usage:
        @router.put("/permissions")
        async def update(actor: Actor = Depends(require_positions("manager", "admin"))):
            ...
    """
    allowed = {plain(p) for p in positions}

    async def position_dependency(
        actor: Annotated[Actor, Depends(get_current_staff)]
    ) -> Actor:
        if actor.position.value not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You do not have permission to access this resource",
            )
        return actor

    return position_dependency


# Every Config endpoint that changes or lists configuration is manager/admin only
get_config_manager = require_positions(*CONFIG_MANAGERS)


def get_authorization_header(request) -> str:
    """
    Extract authorization header for rate limiting.
    Used with slowapi Limiter.
    """
    auth = request.headers.get("Authorization", "")
    return auth or "anonymous"
