from __future__ import annotations

from pydantic import BaseModel, EmailStr, Field, field_validator

from taskflow.tasks.enums import UserRole

# bcrypt refuses longer secrets
MAX_PASSWORD_BYTES = 72


class UserBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr


class UserCreate(UserBase):
    password: str = Field(..., min_length=1)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(
                f"password must be at most {MAX_PASSWORD_BYTES} bytes long"
            )
        return value


class UserOut(UserBase):
    id: int
    role: UserRole

    class Config:
        from_attributes = True


class SignupOut(BaseModel):
    message: str
    user: UserOut


class Token(BaseModel):
    access_token: str
    token_type: str
