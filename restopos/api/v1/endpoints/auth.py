"""Authentication endpoints (API JWT) for business owners and loyalty customers."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from restopos.core.security import (
    TOKEN_KIND_BUSINESS_OWNER,
    TOKEN_KIND_CUSTOMER,
    create_access_token,
    get_current_business_owner,
    get_optional_customer,
    get_password_hash,
    verify_password,
)
from restopos.db.session import get_db
from restopos.models.business import Business, BusinessOwner, Customer
from restopos.schemas.auth import (
    BusinessOwnerResponse,
    BusinessRegisterRequest,
    CustomerRegisterRequest,
    CustomerResponse,
    LoginRequest,
    TokenResponse,
)

router: APIRouter = APIRouter()
logger = logging.getLogger(__name__)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


@router.post("/business/register", response_model=BusinessOwnerResponse, status_code=status.HTTP_201_CREATED)
def register_business(payload: BusinessRegisterRequest, db: Session = Depends(get_db)) -> BusinessOwnerResponse:
    email = _normalize_email(payload.email)
    if db.scalar(select(BusinessOwner).where(BusinessOwner.email == email)) is not None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered")
    business = Business(name=payload.business_name.strip())
    owner = BusinessOwner(business=business, email=email, password_hash=get_password_hash(payload.password))
    db.add_all([business, owner])
    db.commit()
    db.refresh(owner)
    logger.info("[AUTH] Registered business %s with owner %s", business.id, owner.id)
    return BusinessOwnerResponse.model_validate(owner)


@router.post("/business/login", response_model=TokenResponse)
def login_business(payload: LoginRequest, db: Session = Depends(get_db)) -> TokenResponse:
    owner: BusinessOwner | None = db.scalar(
        select(BusinessOwner).where(BusinessOwner.email == _normalize_email(payload.email))
    )
    if owner is None or not verify_password(payload.password, owner.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Incorrect email or password")
    token = create_access_token(
        data={"sub": str(owner.id), "kind": TOKEN_KIND_BUSINESS_OWNER, "business_id": owner.business_id}
    )
    return TokenResponse(access_token=token)


@router.get("/business/me", response_model=BusinessOwnerResponse)
def business_me(owner: BusinessOwner = Depends(get_current_business_owner)) -> BusinessOwnerResponse:
    return BusinessOwnerResponse.model_validate(owner)


@router.post("/customer/register", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
def register_customer(payload: CustomerRegisterRequest, db: Session = Depends(get_db)) -> CustomerResponse:
    if db.get(Business, payload.business_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Business not found")
    email = _normalize_email(payload.email)
    if db.scalar(select(Customer).where(Customer.email == email)) is not None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered")
    customer = Customer(
        business_id=payload.business_id,
        name=payload.name.strip(),
        email=email,
        password_hash=get_password_hash(payload.password),
    )
    db.add(customer)
    db.commit()
    db.refresh(customer)
    return CustomerResponse.model_validate(customer)


@router.post("/customer/login", response_model=TokenResponse)
def login_customer(payload: LoginRequest, db: Session = Depends(get_db)) -> TokenResponse:
    customer: Customer | None = db.scalar(select(Customer).where(Customer.email == _normalize_email(payload.email)))
    if customer is None or not verify_password(payload.password, customer.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Incorrect email or password")
    token = create_access_token(
        data={"sub": str(customer.id), "kind": TOKEN_KIND_CUSTOMER, "business_id": customer.business_id}
    )
    return TokenResponse(access_token=token)


@router.get("/customer/me", response_model=CustomerResponse)
def customer_me(customer: Customer | None = Depends(get_optional_customer)) -> CustomerResponse:
    if customer is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return CustomerResponse.model_validate(customer)
