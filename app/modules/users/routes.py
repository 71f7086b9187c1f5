from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from typing import List, Optional

from app.config.settings import Settings
from app.core.dependencies import get_app_settings, get_auth_provider, get_store
from app.core.exceptions import AuthError
from app.modules.auth.provider import AuthProvider
from app.modules.users.schemas import (
    MemberLogin, MemberLoginResponse, MemberRegister, MemberResponse, MemberSummary,
)
from app.modules.users.service import MemberService

router = APIRouter(prefix="/api/users", tags=["users"])


def get_member_service(
    provider: AuthProvider = Depends(get_auth_provider),
    store=Depends(get_store),
    settings: Settings = Depends(get_app_settings),
) -> MemberService:
    return MemberService(provider, store.table(settings.members_table))


@router.post("/register", response_model=MemberResponse)
async def register(
    member_data: MemberRegister,
    service: MemberService = Depends(get_member_service)
):
    """Register a member with their skills"""
    return await service.register(member_data)


@router.post("/login", response_model=MemberLoginResponse)
async def login(
    login_data: Optional[MemberLogin] = None,
    service: MemberService = Depends(get_member_service)
):
    """Login and get an access token"""
    try:
        return await service.login(login_data or MemberLogin())
    except AuthError as e:
        # This route reports failures under "message"
        return JSONResponse(status_code=e.status_code, content={"message": e.message})


@router.get("", response_model=List[MemberSummary])
async def list_members(service: MemberService = Depends(get_member_service)):
    """List all members: id, name and skills only"""
    return await service.list_members()
