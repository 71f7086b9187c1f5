from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import List, Optional
from datetime import datetime


def _split_skills(value):
    if value is None:
        return []
    if isinstance(value, str):
        return [s.strip() for s in value.split(",") if s.strip()]
    return value


class MemberRegister(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=1)
    skills: List[str] = Field(default_factory=list)

    @field_validator("skills", mode="before")
    @classmethod
    def split_skills(cls, value):
        return _split_skills(value)


class MemberLogin(BaseModel):
    """Presence is checked by the service so failures keep the {message} shape."""
    email: Optional[str] = None
    password: Optional[str] = None


class MemberResponse(BaseModel):
    """Public member record; password material is never part of it."""
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    @field_validator("skills", mode="before")
    @classmethod
    def split_skills(cls, value):
        return _split_skills(value)


class MemberSummary(BaseModel):
    id: str
    name: Optional[str] = None
    skills: List[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")

    @field_validator("skills", mode="before")
    @classmethod
    def split_skills(cls, value):
        return _split_skills(value)


class MemberLoginResponse(BaseModel):
    token: str
    user: MemberResponse
