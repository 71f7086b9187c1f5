from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Any, Dict, Optional
from datetime import datetime

# Fields a caller may change on their own profile
PROFILE_UPDATABLE_FIELDS = ("username", "full_name", "avatar_url", "role")


class AuthUser(BaseModel):
    id: str
    email: Optional[str] = None
    user_metadata: Dict[str, Any] = Field(default_factory=dict)


class Session(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    expires_in: Optional[int] = None
    expires_at: Optional[int] = None


class Profile(BaseModel):
    id: str
    username: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    role: str = "user"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True, extra="ignore")


class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)
    username: str = Field(min_length=1)
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class ProfileUpdate(BaseModel):
    """Anything outside the updatable fields is dropped on parse."""
    username: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    role: Optional[str] = None

    model_config = ConfigDict(extra="ignore")

    def changes(self) -> Dict[str, Any]:
        # Only keys the caller actually sent, explicit nulls included
        return self.model_dump(include=set(PROFILE_UPDATABLE_FIELDS), exclude_unset=True)


class SignupUser(BaseModel):
    id: str
    email: Optional[str] = None


class SignupResponse(BaseModel):
    message: str
    user: SignupUser
    session: Optional[Session] = None
    profile: Optional[Profile] = None


class LoginResponse(BaseModel):
    session: Session
    profile: Optional[Profile] = None


class ProfileResponse(BaseModel):
    profile: Profile
