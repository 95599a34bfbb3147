from __future__ import annotations

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

EMAIL_MAX_LENGTH = 190


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=100)
    full_name: str = Field(..., alias="fullName", min_length=3, max_length=190)

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {"email": "ada@example.com", "password": "s3cret!", "fullName": "Ada Lovelace"}
        },
    )

    @field_validator("email")
    @classmethod
    def check_email_length(cls, value: str) -> str:
        if len(value) > EMAIL_MAX_LENGTH:
            raise ValueError(f"email must be at most {EMAIL_MAX_LENGTH} characters")
        return value


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    model_config = ConfigDict(
        json_schema_extra={"example": {"email": "ada@example.com", "password": "s3cret!"}}
    )


class GoogleLoginRequest(BaseModel):
    id_token: str | None = Field(default=None, alias="idToken")

    model_config = ConfigDict(populate_by_name=True)


class MessageResponse(BaseModel):
    message: str


class TokenResponse(BaseModel):
    token: str

    model_config = ConfigDict(json_schema_extra={"example": {"token": "<jwt>"}})


class UserOut(BaseModel):
    id: int
    email: str
    full_name: str = Field(serialization_alias="fullName")

    model_config = ConfigDict(from_attributes=True)
