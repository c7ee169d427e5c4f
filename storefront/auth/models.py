
from typing import  Optional
from pydantic import BaseModel, Field, field_validator
from storefront.auth.dependencies import normalize_email_address


class RegisterIn(BaseModel):
    email: str = Field(..., examples=["user@example.com"])
    password: str = Field(..., min_length=6, examples=["secret123"])
    first_name: str = Field(..., min_length=2)
    last_name: str = Field(..., min_length=2)
    phone: Optional[str] = None

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        try:
            return normalize_email_address(v)
        except ValueError:
            raise ValueError("Invalid email address")


class LoginIn(BaseModel):
    email: str = Field(...)
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return v.strip().lower()
