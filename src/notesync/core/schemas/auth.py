"""
Identity, profile and sign-in/registration schemas.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _require_text(v: str) -> str:
    if v is None or not v.strip():
        raise ValueError("Fill in all required fields")
    return v.strip()


class Identity(BaseModel):
    """An authenticated user as reported by the identity provider."""

    model_config = ConfigDict(frozen=True)

    uid: str = Field(min_length=1, description="Provider user id")
    email: Optional[str] = Field(default=None, description="Sign-in email")


class Profile(BaseModel):
    """User profile stored once at registration, keyed by uid.

    Stored keys are the Portuguese ones the mobile app has always written.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    full_name: str = Field(default="", alias="nome")
    nickname: str = Field(default="", alias="apelido")
    email: str = Field(default="")
    phone: str = Field(default="", alias="telefone")

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class SignInRequest(BaseModel):
    """Email/password sign-in."""

    email: str
    password: str

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return _require_text(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        # Passwords are not trimmed, only checked for content
        if not v or not v.strip():
            raise ValueError("Fill in all required fields")
        return v

    model_config = ConfigDict(
        json_schema_extra={"example": {"email": "ana@example.com", "password": "segredo1"}}
    )


class RegisterRequest(BaseModel):
    """Account registration. Phone is the only optional field."""

    full_name: str
    nickname: str
    email: str
    password: str
    phone: str = ""

    @field_validator("full_name", "nickname", "email")
    @classmethod
    def validate_required(cls, v):
        return _require_text(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        if not v or not v.strip():
            raise ValueError("Fill in all required fields")
        return v

    @field_validator("phone")
    @classmethod
    def normalize_phone(cls, v):
        return (v or "").strip()

    def to_profile(self) -> Profile:
        return Profile(
            full_name=self.full_name,
            nickname=self.nickname,
            email=self.email,
            phone=self.phone,
        )


class SignInResult(BaseModel):
    """Outcome of a successful sign-in."""

    identity: Identity
    display_name: str = Field(description="Profile nickname, or the email when it is empty")
