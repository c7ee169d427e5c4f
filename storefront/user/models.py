from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from storefront.common.validators import blank_to_none, min_length, valid_email
from storefront.schema.full_schema import AddressType


class ProfileUpdateIn(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None

    @field_validator("first_name", "last_name", "phone")
    @classmethod
    def _strip(cls, v):
        return blank_to_none(v)

    @field_validator("email")
    @classmethod
    def _email(cls, v):
        if blank_to_none(v) is None:
            return None
        return valid_email(v)


class ChangePasswordIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: Optional[str] = Field(default=None, alias="currentPassword", examples=["CurrentPassword"])
    new_password: Optional[str] = Field(default=None, alias="newPassword", examples=["NewPassword"])
    confirm_password: Optional[str] = Field(default=None, alias="confirmPassword")

    @model_validator(mode="after")
    def _check(self):
        if not self.current_password or not self.new_password or not self.confirm_password:
            raise ValueError("All fields are required")
        if self.new_password != self.confirm_password:
            raise ValueError("New passwords do not match")
        if len(self.new_password) < 6:
            raise ValueError("Password must be at least 6 characters")
        return self


class AddressIn(BaseModel):
    full_name: str
    phone: str
    email: Optional[str] = None
    address_line1: str
    address_line2: Optional[str] = None
    city: str
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: str = "Bangladesh"
    is_default: bool = False
    address_type: AddressType = AddressType.BOTH

    @field_validator("full_name")
    @classmethod
    def _name(cls, v):
        return min_length(v, 1, "Full name is required")

    @field_validator("phone")
    @classmethod
    def _phone(cls, v):
        return min_length(v, 10, "Valid phone number is required")

    @field_validator("address_line1")
    @classmethod
    def _line1(cls, v):
        return min_length(v, 5, "Address is required")

    @field_validator("city")
    @classmethod
    def _city(cls, v):
        return min_length(v, 1, "City is required")

    @field_validator("email")
    @classmethod
    def _email(cls, v):
        if blank_to_none(v) is None:
            return None
        return valid_email(v)

    @field_validator("address_line2", "state", "postal_code")
    @classmethod
    def _optional(cls, v):
        return blank_to_none(v)
