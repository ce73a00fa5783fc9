"""
Authentication endpoints.
"""
from fastapi import APIRouter, Depends

from ...core.security import TokenManager
from ...incidents.models import User
from ...services.dashboard import EmergencyService
from ..deps import get_current_user, get_service, get_token_manager
from ..schemas import LoginRequest, TokenResponse, UserResponse

router = APIRouter(prefix="/auth")


@router.post("/login", response_model=TokenResponse)
async def login(
    credentials: LoginRequest,
    service: EmergencyService = Depends(get_service),
    tokens: TokenManager = Depends(get_token_manager),
) -> TokenResponse:
    """
    Exchange dashboard credentials for a bearer token.
    """
    user = service.authenticate(credentials.email, credentials.password)
    access_token = tokens.create_access_token({"sub": user.id, "role": user.role.value})
    return TokenResponse(
        access_token=access_token,
        expires_in=tokens.config.access_token_expire_minutes * 60,
        user=UserResponse.model_validate(user),
    )


@router.get("/me", response_model=UserResponse)
async def read_current_user(current_user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.model_validate(current_user)
