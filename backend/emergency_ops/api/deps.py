"""
Common FastAPI dependencies used across the API.
"""
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from ..core.exceptions import AuthenticationError
from ..core.security import TokenManager
from ..incidents.models import User
from ..services.dashboard import EmergencyService

# OAuth2 scheme for token authentication
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="/api/v1/auth/login",
    auto_error=False
)


def get_service(request: Request) -> EmergencyService:
    """The service wired up by the application lifespan."""
    return request.app.state.service


def get_token_manager(request: Request) -> TokenManager:
    return request.app.state.token_manager


async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    tokens: TokenManager = Depends(get_token_manager),
    service: EmergencyService = Depends(get_service),
) -> User:
    """
    Get current authenticated user from JWT token.
    Raises 401 if token is missing, invalid or names an unknown user.
    """
    if not token:
        raise AuthenticationError("Not authenticated")

    payload = tokens.verify_token(token)
    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError("Could not validate credentials")

    return service.identity.get_user(user_id)
