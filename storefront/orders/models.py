from typing import Literal, Optional, Union
from pydantic import BaseModel, Field, field_validator, model_validator
from storefront.common.validators import blank_to_none, min_length, valid_email
from storefront.schema.full_schema import OrderStatus, PaymentStatus


class AddressBlock(BaseModel):
    """One address snapshot as written onto an order (shipping_* or billing_* columns)."""
    name: str
    phone: str
    email: str
    address_line1: str
    address_line2: Optional[str] = None
    city: str
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: str = "Bangladesh"

    def as_columns(self, prefix: str) -> dict:
        return {f"{prefix}_{k}": v for k, v in self.model_dump().items()}


class SameAsShipping(BaseModel):
    billing_same_as_shipping: Literal[True] = True


class SeparateBilling(BaseModel):
    billing_same_as_shipping: Literal[False] = False
    address: AddressBlock


BillingChoice = Union[SameAsShipping, SeparateBilling]


class CheckoutIn(BaseModel):
    """
    Flat checkout form. billing_same_as_shipping selects which billing variant
    applies; with false the billing_* fields become mandatory.
    Prices are never accepted from the client.
    """
    shipping_name: str
    shipping_phone: str
    shipping_email: str
    shipping_address_line1: str
    shipping_address_line2: Optional[str] = None
    shipping_city: str
    shipping_state: Optional[str] = None
    shipping_postal_code: Optional[str] = None
    shipping_country: str = "Bangladesh"

    billing_same_as_shipping: bool = True
    billing_name: Optional[str] = None
    billing_phone: Optional[str] = None
    billing_email: Optional[str] = None
    billing_address_line1: Optional[str] = None
    billing_address_line2: Optional[str] = None
    billing_city: Optional[str] = None
    billing_state: Optional[str] = None
    billing_postal_code: Optional[str] = None
    billing_country: Optional[str] = None

    notes: Optional[str] = None

    @field_validator("shipping_name")
    @classmethod
    def _name(cls, v):
        return min_length(v, 1, "Name is required")

    @field_validator("shipping_phone")
    @classmethod
    def _phone(cls, v):
        return min_length(v, 10, "Valid phone number is required")

    @field_validator("shipping_email")
    @classmethod
    def _email(cls, v):
        return valid_email(v, "Valid email is required")

    @field_validator("shipping_address_line1")
    @classmethod
    def _line1(cls, v):
        return min_length(v, 5, "Address is required")

    @field_validator("shipping_city")
    @classmethod
    def _city(cls, v):
        return min_length(v, 1, "City is required")

    @field_validator("shipping_address_line2", "shipping_state", "shipping_postal_code", "notes",
                     "billing_name", "billing_phone", "billing_email", "billing_address_line1",
                     "billing_address_line2", "billing_city", "billing_state", "billing_postal_code",
                     "billing_country")
    @classmethod
    def _optional(cls, v):
        return blank_to_none(v)

    @model_validator(mode="after")
    def _billing_required(self):
        if self.billing_same_as_shipping:
            return self
        min_length(self.billing_name, 1, "Billing name is required")
        min_length(self.billing_phone, 10, "Valid billing phone number is required")
        self.billing_email = valid_email(self.billing_email, "Valid billing email is required")
        min_length(self.billing_address_line1, 5, "Billing address is required")
        min_length(self.billing_city, 1, "Billing city is required")
        return self

    def shipping_address(self) -> AddressBlock:
        return AddressBlock(
            name=self.shipping_name, phone=self.shipping_phone, email=self.shipping_email,
            address_line1=self.shipping_address_line1, address_line2=self.shipping_address_line2,
            city=self.shipping_city, state=self.shipping_state, postal_code=self.shipping_postal_code,
            country=self.shipping_country or "Bangladesh",
        )

    def billing(self) -> BillingChoice:
        if self.billing_same_as_shipping:
            return SameAsShipping()
        return SeparateBilling(address=AddressBlock(
            name=self.billing_name, phone=self.billing_phone, email=self.billing_email,
            address_line1=self.billing_address_line1, address_line2=self.billing_address_line2,
            city=self.billing_city, state=self.billing_state, postal_code=self.billing_postal_code,
            country=self.billing_country or self.shipping_country or "Bangladesh",
        ))


class OrderUpdateIn(BaseModel):
    status: Optional[OrderStatus] = None
    payment_status: Optional[PaymentStatus] = None
    admin_notes: Optional[str] = Field(default=None, max_length=5000)
