"""Security utilities for password hashing and JWT-based auth."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from restopos.core.config import settings
from restopos.db.session import get_db
from restopos.models.business import BusinessOwner, Customer

TOKEN_KIND_BUSINESS_OWNER = "business_owner"
TOKEN_KIND_CUSTOMER = "customer"

logger = logging.getLogger(__name__)
pwd_context: CryptContext = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
bearer_scheme: HTTPBearer = HTTPBearer(auto_error=False)


def get_password_hash(password: str) -> str:
    """Hash a plaintext password."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plaintext password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict[str, Any]) -> str:
    """Create a signed JWT access token from payload data."""
    to_encode: dict[str, Any] = data.copy()
    expire: datetime = datetime.now(timezone.utc) + timedelta(
        minutes=settings.jwt_expire_minutes
    )
    to_encode.update({"exp": expire})
    return jwt.encode(
        to_encode,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )


def verify_token(token: str) -> dict[str, Any]:
    """Decode and validate a JWT token payload."""
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        ) from exc

    return payload


def _subject_id(payload: dict[str, Any], expected_kind: str) -> int:
    if payload.get("kind") != expected_kind:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
        )
    try:
        return int(payload.get("sub"))
    except (TypeError, ValueError) as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
        ) from exc


def get_current_business_owner(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> BusinessOwner:
    """Resolve the authenticated business owner from the Authorization header."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    payload: dict[str, Any] = verify_token(credentials.credentials)
    owner_id = _subject_id(payload, TOKEN_KIND_BUSINESS_OWNER)

    owner: BusinessOwner | None = db.get(BusinessOwner, owner_id)
    if owner is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Business owner not found",
        )

    return owner


def get_current_business_id(owner: BusinessOwner = Depends(get_current_business_owner)) -> int:
    """Business id of the authenticated owner; the only identity handlers consume."""
    return owner.business_id


def get_optional_customer(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Customer | None:
    """Resolve a customer from a bearer token when one is sent; guests get ``None``."""
    if credentials is None:
        return None
    try:
        payload = verify_token(credentials.credentials)
        customer_id = _subject_id(payload, TOKEN_KIND_CUSTOMER)
    except HTTPException:
        logger.warning("[AUTH] Customer token rejected; continuing as guest")
        return None
    return db.get(Customer, customer_id)
