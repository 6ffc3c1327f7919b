import re
from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field, ValidationInfo, field_validator

from student_portal.models.user import Role
from student_portal.schemas.base import CamelModel

PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")
NAME_PATTERN = re.compile(r"^[a-zA-Z\s]+$")


class RegisterRequest(CamelModel):
    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., min_length=8)
    confirm_password: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=100)
    role: Role = Role.STUDENT

    class Config:
        json_schema_extra = {
            "example": {
                "email": "john.doe@student.edu",
                "password": "Password123",
                "confirmPassword": "Password123",
                "name": "John Doe",
                "role": "STUDENT",
            }
        }

    @field_validator("password")
    @classmethod
    def password_strength(cls, value: str) -> str:
        if not PASSWORD_PATTERN.match(value):
            raise ValueError(
                "Password must contain at least one uppercase letter, one lowercase letter, and one number"
            )
        return value

    @field_validator("name")
    @classmethod
    def name_letters_only(cls, value: str) -> str:
        if not NAME_PATTERN.match(value):
            raise ValueError("Name can only contain letters and spaces")
        return value

    @field_validator("confirm_password")
    @classmethod
    def passwords_match(cls, value: str, info: ValidationInfo) -> str:
        password = info.data.get("password")
        if password is not None and value != password:
            raise ValueError("Passwords don't match")
        return value


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    class Config:
        json_schema_extra = {
            "example": {
                "email": "john.doe@student.edu",
                "password": "Password123",
            }
        }


class UserData(CamelModel):
    # No password hash here, ever
    id: int
    email: str
    name: str
    role: Role
    avatar: Optional[str] = None
    created_at: datetime


class AuthData(CamelModel):
    user: UserData
    token: str


class CurrentUser(CamelModel):
    """Identity the Authorization Gate hands to request handlers."""

    id: int
    email: str
    role: Role
