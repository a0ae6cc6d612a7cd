"""Authentication-related request and response schemas."""

from pydantic import BaseModel, ConfigDict, Field


class BusinessRegisterRequest(BaseModel):
    """Payload registering a business together with its first owner account."""

    business_name: str = Field(min_length=1, alias="businessName")
    email: str = Field(min_length=3)
    password: str = Field(min_length=4)

    model_config = ConfigDict(populate_by_name=True)


class CustomerRegisterRequest(BaseModel):
    """Payload registering a loyalty customer of one business."""

    business_id: int = Field(alias="businessId")
    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    password: str = Field(min_length=4)

    model_config = ConfigDict(populate_by_name=True)


class LoginRequest(BaseModel):
    """Payload for login."""

    email: str
    password: str


class TokenResponse(BaseModel):
    """JWT response payload."""

    access_token: str
    token_type: str = "bearer"


class BusinessOwnerResponse(BaseModel):
    id: int
    email: str
    business_id: int = Field(alias="businessId")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class CustomerResponse(BaseModel):
    id: int
    name: str
    email: str
    business_id: int = Field(alias="businessId")
    points: int
    total_orders: int = Field(alias="totalOrders")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)
