"""Inventory endpoints."""

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from restopos.core.security import get_current_business_id
from restopos.db.session import get_db
from restopos.models.inventory import InventoryItem
from restopos.schemas.inventory import InventoryItemCreate, InventoryItemRead

router: APIRouter = APIRouter()


@router.get("", response_model=list[InventoryItemRead])
def list_inventory(
    business_id: int = Depends(get_current_business_id),
    db: Session = Depends(get_db),
) -> list[InventoryItemRead]:
    items = db.scalars(
        select(InventoryItem).where(InventoryItem.business_id == business_id).order_by(InventoryItem.name.asc())
    ).all()
    return [InventoryItemRead.model_validate(item) for item in items]


@router.post("", response_model=InventoryItemRead, status_code=status.HTTP_201_CREATED)
def create_inventory_item(
    payload: InventoryItemCreate,
    business_id: int = Depends(get_current_business_id),
    db: Session = Depends(get_db),
) -> InventoryItemRead:
    item = InventoryItem(business_id=business_id, name=payload.name.strip(), quantity=payload.quantity, unit=payload.unit)
    db.add(item)
    db.commit()
    db.refresh(item)
    return InventoryItemRead.model_validate(item)
