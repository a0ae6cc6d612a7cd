"""Bill endpoints: settlement, previews, charge edits and image links."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from restopos.api.deps import get_owned_order, http_error, resolve_order_id
from restopos.core.security import get_current_business_id
from restopos.db.session import get_db
from restopos.models.bill import Bill
from restopos.models.business import Business
from restopos.models.order import Order
from restopos.schemas.bill import (
    BillCalculations,
    BillCreate,
    BillDetailsResponse,
    BillItemsUpdate,
    BillLinkResponse,
    BillMutationResponse,
    BillOrderSummary,
    BillRead,
    BillWithItemsRead,
    EffectiveTaxRates,
    MessageResponse,
    PreviewBillRequest,
    PreviewBillResponse,
    PreviewLine,
    StoreLinkPayload,
    TaxRatesPayload,
)
from restopos.schemas.order import OrderItemRead
from restopos.services import bill_service
from restopos.services.billing import ZERO
from restopos.services.image_store import CloudinaryImageStore, ImageStoreError, get_image_store
from restopos.services.order_service import OrderServiceError, format_order_id, get_business_order
from restopos.services.pdf_exports import bill_filename, render_bill_pdf

router: APIRouter = APIRouter()
logger = logging.getLogger(__name__)


def _load_order(db: Session, raw_order_id: str | int, business_id: int) -> Order:
    try:
        return get_business_order(db, resolve_order_id(str(raw_order_id)), business_id)
    except OrderServiceError as exc:
        raise http_error(exc) from exc


def _require_items(order: Order) -> None:
    if not order.items:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Order items not found")


def _bill_read(bill: Bill) -> BillRead:
    """Serialized bill with the image links hidden once they have expired."""
    plain, modified = bill_service.visible_links(bill)
    return BillRead.model_validate(bill).model_copy(
        update={"bill_store_link": plain, "modified_bill_store_link": modified}
    )


@router.post("/bill", response_model=BillMutationResponse, status_code=status.HTTP_201_CREATED)
def create_bill(
    payload: BillCreate,
    business_id: int = Depends(get_current_business_id),
    db: Session = Depends(get_db),
) -> BillMutationResponse:
    """Settle an order: store the rates, compute the total and complete every line."""
    order = _load_order(db, payload.order_id, business_id)
    bill = bill_service.create_bill(db, order, payload.tax_rates.model_dump())
    return BillMutationResponse(bill=_bill_read(bill), message="Bill created successfully")


@router.get("/bill/{orderId}/details", response_model=BillDetailsResponse)
def bill_details(order: Order = Depends(get_owned_order), db: Session = Depends(get_db)) -> BillDetailsResponse:
    bill = bill_service.get_bill(db, order.id)
    base, rates, totals = bill_service.order_totals(order, bill)
    return BillDetailsResponse(
        order=BillOrderSummary(
            id=order.id,
            order_id=format_order_id(order.id),
            table_number=order.table_number,
            created_at=order.created_at,
            payment_method=order.payment_method,
            status=order.status,
            items=[OrderItemRead.model_validate(item) for item in order.items],
        ),
        bill=_bill_read(bill) if bill is not None else None,
        calculations=BillCalculations(
            base_amount=base,
            vat_low_amount=totals.vat_low_amount,
            vat_high_amount=totals.vat_high_amount,
            service_tax_amount=totals.service_tax_amount,
            service_charge_amount=totals.service_charge_amount,
            total_amount=totals.total_amount,
        ),
        tax_rates=EffectiveTaxRates(
            vat_low=rates.vat_low or ZERO,
            vat_high=rates.vat_high or ZERO,
            service_tax=rates.service_tax or ZERO,
            service_charge=rates.service_charge or ZERO,
        ),
    )


@router.post("/fake-bill", response_model=PreviewBillResponse)
def preview_bill(
    payload: PreviewBillRequest,
    business_id: int = Depends(get_current_business_id),
    db: Session = Depends(get_db),
) -> PreviewBillResponse:
    """Totals of the order plus extra dishes. Nothing is persisted."""
    order = _load_order(db, payload.order_id, business_id)
    _require_items(order)
    result = bill_service.preview(order, bill_service.get_bill(db, order.id), payload.extra_dishes)
    lines = [PreviewLine(name=item.name, price=item.price, quantity=item.quantity) for item in order.items]
    lines.extend(
        PreviewLine(name=dish.dish_name, price=dish.price, quantity=dish.quantity) for dish in payload.extra_dishes
    )
    return PreviewBillResponse(
        original_amount=result.original_amount,
        preview_amount=result.preview_amount,
        items=lines,
        message="Fake bill generated successfully",
    )


@router.get("/bill/{orderId}", response_model=BillWithItemsRead | MessageResponse)
def get_bill(order: Order = Depends(get_owned_order), db: Session = Depends(get_db)) -> BillWithItemsRead | MessageResponse:
    bill = bill_service.get_bill(db, order.id)
    if bill is None:
        return MessageResponse(message="No bill found for this order")
    return BillWithItemsRead(
        **_bill_read(bill).model_dump(),
        order_items=[OrderItemRead.model_validate(item) for item in order.items],
    )


@router.put("/bill/{orderId}/update-charges", response_model=BillMutationResponse)
def update_charges(
    payload: TaxRatesPayload,
    order: Order = Depends(get_owned_order),
    db: Session = Depends(get_db),
) -> BillMutationResponse:
    """Merge the given rates into the stored ones; omitted rates are kept, ``null`` clears."""
    _require_items(order)
    rate_updates = {field: getattr(payload, field) for field in payload.model_fields_set}
    try:
        bill = bill_service.update_charges(db, order, rate_updates)
    except bill_service.BillNotFoundError as exc:
        raise http_error(exc) from exc
    return BillMutationResponse(bill=_bill_read(bill), message="Charges updated successfully")


@router.put("/bill/{orderId}/store-link", response_model=BillMutationResponse)
def store_link(
    payload: StoreLinkPayload,
    response: Response,
    order: Order = Depends(get_owned_order),
    db: Session = Depends(get_db),
) -> BillMutationResponse:
    """Record the hosted image of a rendered bill; 201 when this creates the bill."""
    _require_items(order)
    bill, created = bill_service.store_link(
        db, order, str(payload.bill_store_link), payload.public_id, payload.is_modified
    )
    if created:
        response.status_code = status.HTTP_201_CREATED
        return BillMutationResponse(bill=_bill_read(bill), message="Bill created with store link")
    return BillMutationResponse(bill=_bill_read(bill), message="Bill store link updated successfully")


@router.put("/bill/{orderId}/update-items", response_model=BillMutationResponse)
def update_items(
    payload: BillItemsUpdate,
    order: Order = Depends(get_owned_order),
    db: Session = Depends(get_db),
) -> BillMutationResponse:
    """Replace the order lines and recompute bill and order totals with the stored rates."""
    bill = bill_service.replace_items(db, order, payload.items)
    return BillMutationResponse(bill=_bill_read(bill), message="Bill items updated successfully")


@router.get("/bill/{orderId}/link", response_model=BillLinkResponse)
def bill_link(order: Order = Depends(get_owned_order), db: Session = Depends(get_db)) -> BillLinkResponse:
    bill = bill_service.get_bill(db, order.id)
    if bill is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bill not found")
    plain, modified = bill_service.visible_links(bill)
    return BillLinkResponse(bill_store_link=plain, modified_bill_store_link=modified)


@router.post("/bill/{orderId}/publish", response_model=BillMutationResponse)
def publish_bill(
    response: Response,
    isModified: bool = False,
    order: Order = Depends(get_owned_order),
    db: Session = Depends(get_db),
    image_store: CloudinaryImageStore = Depends(get_image_store),
) -> BillMutationResponse:
    """Render the bill as PDF, upload it and record the resulting link."""
    _require_items(order)
    business = db.get(Business, order.business_id)
    content = render_bill_pdf(order, bill_service.get_bill(db, order.id), business.name if business else None)
    try:
        stored = image_store.upload(content, bill_filename(order, isModified), folder="bills")
    except ImageStoreError as exc:
        logger.exception("[BILLS] Upload failed for order %s", format_order_id(order.id))
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Bill upload failed") from exc
    bill, created = bill_service.store_link(db, order, stored.url, stored.public_id, isModified)
    if created:
        response.status_code = status.HTTP_201_CREATED
    return BillMutationResponse(bill=_bill_read(bill), message="Bill published successfully")
