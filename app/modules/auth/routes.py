from fastapi import APIRouter, Depends

from app.config.settings import Settings
from app.core.dependencies import get_app_settings, get_auth_provider, get_current_user, get_store
from app.modules.auth.provider import AuthProvider
from app.modules.auth.schemas import (
    AuthUser, LoginRequest, LoginResponse, ProfileResponse, ProfileUpdate,
    SignupRequest, SignupResponse,
)
from app.modules.auth.service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


def get_auth_service(
    provider: AuthProvider = Depends(get_auth_provider),
    store=Depends(get_store),
    settings: Settings = Depends(get_app_settings),
) -> AuthService:
    return AuthService(provider, store.table(settings.profiles_table))


@router.post("/signup", response_model=SignupResponse, status_code=201)
async def signup(
    signup_data: SignupRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user with a profile and return a session"""
    return await service.signup(signup_data)


@router.post("/login", response_model=LoginResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get a session plus profile"""
    return await service.login(login_data)


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    current_user: AuthUser = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service)
):
    """Get the authenticated user's profile"""
    return await service.get_profile(current_user)


@router.put("/profile", response_model=ProfileResponse)
async def update_profile(
    update_data: ProfileUpdate,
    current_user: AuthUser = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service)
):
    """Update the authenticated user's profile (username, full_name, avatar_url, role)"""
    return await service.update_profile(current_user, update_data)
