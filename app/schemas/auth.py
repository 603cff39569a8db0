"""Pydantic schemas for authentication endpoints.

Bodies use camelCase on the wire. Blank optional strings are turned into
None here, so the services never see empty strings.
"""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from app.models.user import User


def blank_to_none(value: object) -> object:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LoginRequest(CamelModel):
    user_name: str
    password: str


class RegisterRequest(CamelModel):
    user_name: str
    password: str
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None

    @field_validator("email", "first_name", "last_name", mode="before")
    @classmethod
    def normalize_optional(cls, value: object) -> object:
        return blank_to_none(value)


class UpdateProfileRequest(CamelModel):
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    profile_picture: str | None = None

    @field_validator("email", "first_name", "last_name", "profile_picture", mode="before")
    @classmethod
    def normalize_optional(cls, value: object) -> object:
        return blank_to_none(value)

    def changes(self) -> dict[str, str | None]:
        """Fields sent in the body, trimmed. Omitted fields are not included."""
        result: dict[str, str | None] = {}
        for field in self.model_fields_set:
            value = getattr(self, field)
            if isinstance(value, str) and field != "profile_picture":
                value = value.strip()
            result[field] = value
        return result


class ChangePasswordRequest(CamelModel):
    current_password: str
    new_password: str


class UserExistsResponse(CamelModel):
    exists: bool


class UserCreatedResponse(CamelModel):
    id: int
    user_name: str


class ProfileResponse(CamelModel):
    id: int
    user_name: str
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    profile_picture: str | None = None
    has_profile_picture: bool = False
    created_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "ProfileResponse":
        created_at = user.created_at
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=UTC)
        return cls(
            id=user.id,
            user_name=user.user_name,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            profile_picture=user.profile_picture,
            has_profile_picture=bool(user.profile_picture),
            created_at=created_at,
        )


class LoginResponse(CamelModel):
    token: str
    expires_in: int
    profile: ProfileResponse


class MessageResponse(CamelModel):
    message: str
