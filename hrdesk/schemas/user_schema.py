from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from hrdesk.models.user import UserRole

MAX_EXTRA_FIELDS = 16
MAX_EXTRA_KEY_LENGTH = 64
MAX_EXTRA_VALUE_LENGTH = 512


def _check_extra(v: Optional[Dict[str, Optional[str]]]) -> Optional[Dict[str, Optional[str]]]:
    if v is None:
        return v
    if len(v) > MAX_EXTRA_FIELDS:
        raise ValueError(f"at most {MAX_EXTRA_FIELDS} extra fields are allowed")
    for key, value in v.items():
        if not key or len(key) > MAX_EXTRA_KEY_LENGTH:
            raise ValueError(f"extra field names must be 1-{MAX_EXTRA_KEY_LENGTH} characters")
        if value is not None and len(value) > MAX_EXTRA_VALUE_LENGTH:
            raise ValueError(f"extra field '{key}' exceeds {MAX_EXTRA_VALUE_LENGTH} characters")
    return v


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EmailBody(BaseModel):
    email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")


class UserProfile(CamelModel):
    name: Optional[str] = Field(default=None, max_length=100)
    photo: Optional[str] = Field(default=None, max_length=500)
    designation: Optional[str] = Field(default=None, max_length=100)
    bank_account: Optional[str] = Field(default=None, max_length=64)


class UserCreate(UserProfile, EmailBody):
    # role, isVerified, isFired and salary are not fields here, so any value a
    # registrant sends for them is dropped before it reaches the store
    extra: Dict[str, Optional[str]] = Field(default_factory=dict)

    @field_validator("extra")
    @classmethod
    def check_extra(cls, v):
        return _check_extra(v)


class UserUpdate(UserProfile):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    salary: Optional[float] = Field(default=None, ge=0)
    extra: Optional[Dict[str, Optional[str]]] = None

    @field_validator("extra")
    @classmethod
    def check_extra(cls, v):
        return _check_extra(v)


class RoleUpdate(BaseModel):
    role: UserRole


class UserResponse(UserProfile):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    email: str
    role: Optional[UserRole]
    is_verified: bool
    is_fired: bool
    salary: float
    extra: Dict[str, Optional[str]] = Field(default_factory=dict)

    @field_validator("role", mode="before")
    @classmethod
    def known_role(cls, v):
        # A role written to the store out of band may not be one we know
        return UserRole.parse(v)


class UserUpdateResponse(BaseModel):
    modified: bool
    user: UserResponse


class RoleResponse(BaseModel):
    role: Optional[UserRole] = None


class AdminResponse(BaseModel):
    admin: bool


class FiredResponse(BaseModel):
    fired: bool


class StatusResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
