"""Product (menu) endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from restopos.core.security import get_current_business_id
from restopos.db.session import get_db
from restopos.models.product import Product
from restopos.schemas.bill import MessageResponse
from restopos.schemas.product import ProductCreate, ProductResponse, ProductUpdate

router: APIRouter = APIRouter()
logger = logging.getLogger(__name__)


def _get_owned_product(db: Session, product_id: int, business_id: int) -> Product:
    product: Product | None = db.get(Product, product_id)
    if product is None or product.business_id != business_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found or not authorized")
    return product


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
def create_product(
    payload: ProductCreate,
    business_id: int = Depends(get_current_business_id),
    db: Session = Depends(get_db),
) -> ProductResponse:
    product = Product(
        business_id=business_id,
        name=payload.name.strip(),
        description=payload.description,
        price=payload.price,
        product_type=payload.product_type,
        category=payload.category,
        images=payload.images,
        recipe=[ingredient.model_dump() for ingredient in payload.recipe],
    )
    db.add(product)
    db.commit()
    db.refresh(product)
    return ProductResponse.model_validate(product)


@router.get("", response_model=list[ProductResponse])
def list_products(
    business_id: int = Query(alias="businessId", ge=1),
    db: Session = Depends(get_db),
) -> list[ProductResponse]:
    """Public menu of a business."""
    products = db.scalars(
        select(Product).where(Product.business_id == business_id).order_by(Product.id.asc())
    ).all()
    return [ProductResponse.model_validate(product) for product in products]


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(
    product_id: int,
    business_id: int = Depends(get_current_business_id),
    db: Session = Depends(get_db),
) -> ProductResponse:
    return ProductResponse.model_validate(_get_owned_product(db, product_id, business_id))


@router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: int,
    payload: ProductUpdate,
    business_id: int = Depends(get_current_business_id),
    db: Session = Depends(get_db),
) -> ProductResponse:
    product = _get_owned_product(db, product_id, business_id)
    changes = payload.model_dump(exclude_unset=True)
    if "recipe" in changes:
        changes["recipe"] = [ingredient.model_dump() for ingredient in payload.recipe or []]
    for field, value in changes.items():
        setattr(product, field, value)
    db.commit()
    db.refresh(product)
    return ProductResponse.model_validate(product)


@router.delete("", response_model=MessageResponse)
def delete_category_products(
    category: str = Query(min_length=1),
    business_id: int = Depends(get_current_business_id),
    db: Session = Depends(get_db),
) -> MessageResponse:
    """Delete every product of one category."""
    result = db.execute(
        delete(Product).where(Product.business_id == business_id, Product.category == category)
    )
    if not result.rowcount:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
    db.commit()
    logger.info("[PRODUCTS] Deleted %s product(s) of category %r for business %s", result.rowcount, category, business_id)
    return MessageResponse(message="All dishes in category deleted")


@router.delete("/{product_id}", response_model=MessageResponse)
def delete_product(
    product_id: int,
    business_id: int = Depends(get_current_business_id),
    db: Session = Depends(get_db),
) -> MessageResponse:
    db.delete(_get_owned_product(db, product_id, business_id))
    db.commit()
    return MessageResponse(message="Product deleted successfully")
