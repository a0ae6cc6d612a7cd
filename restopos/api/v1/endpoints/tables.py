"""Dining table endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from restopos.core.security import get_current_business_id
from restopos.db.session import get_db
from restopos.models.table import DiningTable
from restopos.schemas.inventory import TableCreate
from restopos.schemas.order import TableRead
from restopos.services.order_service import release_table

router: APIRouter = APIRouter()


@router.get("", response_model=list[TableRead])
def list_tables(
    business_id: int = Depends(get_current_business_id),
    db: Session = Depends(get_db),
) -> list[TableRead]:
    tables = db.scalars(
        select(DiningTable).where(DiningTable.business_id == business_id).order_by(DiningTable.number.asc())
    ).all()
    return [TableRead.model_validate(table) for table in tables]


@router.post("", response_model=TableRead, status_code=status.HTTP_201_CREATED)
def create_table(
    payload: TableCreate,
    business_id: int = Depends(get_current_business_id),
    db: Session = Depends(get_db),
) -> TableRead:
    existing = db.scalar(
        select(DiningTable).where(DiningTable.business_id == business_id, DiningTable.number == payload.number)
    )
    if existing is not None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Table number already exists")
    table = DiningTable(business_id=business_id, number=payload.number)
    db.add(table)
    db.commit()
    db.refresh(table)
    return TableRead.model_validate(table)


@router.patch("/{table_id}/release", response_model=TableRead)
def release(
    table_id: int,
    business_id: int = Depends(get_current_business_id),
    db: Session = Depends(get_db),
) -> TableRead:
    """Free a table after its order is settled."""
    table: DiningTable | None = db.get(DiningTable, table_id)
    if table is None or table.business_id != business_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Table not found")
    return TableRead.model_validate(release_table(db, table))
