from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, validator

PHONE_PATTERN = r"^((\+9665\d{8})|(05\d{8}))$"


class UserRole(str, Enum):
    VISITOR = "visitor"
    ADMIN = "admin"


class RegisterRequest(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: str = Field(..., pattern=PHONE_PATTERN)
    password: str = Field(..., min_length=6, max_length=100)
    confirm_password: str
    agree_terms: bool = False

    @validator("email")
    def email_length(cls, v):
        if len(v) > 100:
            raise ValueError("Email must not exceed 100 characters")
        return v

    @validator("confirm_password")
    def passwords_match(cls, v, values):
        if "password" in values and v != values["password"]:
            raise ValueError("The password and confirmation password do not match.")
        return v

    @validator("agree_terms", always=True)
    def terms_accepted(cls, v):
        if not v:
            raise ValueError("You must agree to the terms and conditions")
        return v


class LoginRequest(BaseModel):
    email: EmailStr
    password: str
    remember_me: bool = False


class UserResponse(BaseModel):
    user_id: int
    full_name: str
    email: EmailStr
    role: str
    image: Optional[str] = None
    added_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AuthResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    redirect_to: str
    user: UserResponse


class VisitorProfile(BaseModel):
    visitor_id: int
    first_name: str
    last_name: str
    phone: Optional[str] = None
    bio: Optional[str] = None
    email: Optional[str] = None
    image: Optional[str] = None

    class Config:
        from_attributes = True


class VisitorProfileUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    bio: Optional[str] = Field(None, max_length=500)

    @validator("first_name", "last_name")
    def names_not_null(cls, v):
        if v is None:
            raise ValueError("Name cannot be empty")
        return v
