"""Bill API schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import AnyUrl, BaseModel, ConfigDict, Field

from restopos.schemas.common import Money, Percentage
from restopos.schemas.order import OrderItemRead


class TaxRatesPayload(BaseModel):
    """Percentages in [0, 100]; null or omitted means no contribution."""

    vat_low: Decimal | None = Field(default=None, ge=0, le=100, alias="vatLow")
    vat_high: Decimal | None = Field(default=None, ge=0, le=100, alias="vatHigh")
    service_tax: Decimal | None = Field(default=None, ge=0, le=100, alias="serviceTax")
    service_charge: Decimal | None = Field(default=None, ge=0, le=100, alias="serviceCharge")

    model_config = ConfigDict(populate_by_name=True)


class BillCreate(BaseModel):
    """Payload for creating the real bill of an order."""

    order_id: str | int = Field(alias="orderId")
    tax_rates: TaxRatesPayload = Field(alias="taxRates")

    model_config = ConfigDict(populate_by_name=True)


class ExtraDish(BaseModel):
    """Dish added to a preview bill only."""

    dish_name: str = Field(min_length=1, alias="dishName")
    price: Money = Field(ge=0)
    quantity: int = Field(ge=1)

    model_config = ConfigDict(populate_by_name=True)


class PreviewBillRequest(BaseModel):
    """Payload for a preview bill with extra dishes; nothing is stored."""

    order_id: str | int = Field(alias="orderId")
    extra_dishes: list[ExtraDish] = Field(alias="extraDishes")

    model_config = ConfigDict(populate_by_name=True)


class BillItemPayload(BaseModel):
    """Replacement order line for a modified bill."""

    product_id: int | None = Field(default=None, alias="productId")
    name: str = Field(min_length=1)
    price: Money = Field(ge=0)
    quantity: int = Field(ge=1)

    model_config = ConfigDict(populate_by_name=True)


class BillItemsUpdate(BaseModel):
    items: list[BillItemPayload]


class StoreLinkPayload(BaseModel):
    """External image location of a rendered bill."""

    bill_store_link: AnyUrl = Field(alias="billStoreLink")
    public_id: str = Field(min_length=1, alias="cloudinaryPublicId")
    is_modified: bool = Field(default=False, alias="isModified")

    model_config = ConfigDict(populate_by_name=True)


class BillRead(BaseModel):
    """Serialized bill."""

    id: int
    order_id: int = Field(alias="orderId")
    business_id: int = Field(alias="businessId")
    total_amount: Money = Field(alias="totalAmount")
    vat_low: Percentage | None = Field(alias="vatLow")
    vat_high: Percentage | None = Field(alias="vatHigh")
    service_tax: Percentage | None = Field(alias="serviceTax")
    service_charge: Percentage | None = Field(alias="serviceCharge")
    bill_store_link: str | None = Field(alias="billStoreLink")
    bill_store_public_id: str | None = Field(alias="billStorePublicId")
    modified_bill_store_link: str | None = Field(alias="modifiedBillStoreLink")
    modified_bill_store_public_id: str | None = Field(alias="modifiedBillStorePublicId")
    expires_at: datetime | None = Field(alias="expiresAt")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class BillWithItemsRead(BillRead):
    order_items: list[OrderItemRead] = Field(alias="orderItems")


class BillMutationResponse(BaseModel):
    bill: BillRead
    message: str


class BillCalculations(BaseModel):
    base_amount: Money = Field(alias="baseAmount")
    vat_low_amount: Money = Field(alias="vatLowAmount")
    vat_high_amount: Money = Field(alias="vatHighAmount")
    service_tax_amount: Money = Field(alias="serviceTaxAmount")
    service_charge_amount: Money = Field(alias="serviceChargeAmount")
    total_amount: Money = Field(alias="totalAmount")

    model_config = ConfigDict(populate_by_name=True)


class EffectiveTaxRates(BaseModel):
    vat_low: Percentage = Field(alias="vatLow")
    vat_high: Percentage = Field(alias="vatHigh")
    service_tax: Percentage = Field(alias="serviceTax")
    service_charge: Percentage = Field(alias="serviceCharge")

    model_config = ConfigDict(populate_by_name=True)


class BillOrderSummary(BaseModel):
    id: int
    order_id: str
    table_number: int | None
    created_at: datetime
    payment_method: str
    status: str
    items: list[OrderItemRead]


class BillDetailsResponse(BaseModel):
    """Order, stored bill and the full calculation breakdown."""

    order: BillOrderSummary
    bill: BillRead | None
    calculations: BillCalculations
    tax_rates: EffectiveTaxRates = Field(alias="taxRates")

    model_config = ConfigDict(populate_by_name=True)


class PreviewLine(BaseModel):
    name: str
    price: Money
    quantity: int


class PreviewBillResponse(BaseModel):
    original_amount: Money = Field(alias="originalAmount")
    preview_amount: Money = Field(alias="fakeAmount")
    items: list[PreviewLine]
    message: str

    model_config = ConfigDict(populate_by_name=True)


class BillLinkResponse(BaseModel):
    bill_store_link: str | None = Field(alias="billStoreLink")
    modified_bill_store_link: str | None = Field(alias="modifiedBillStoreLink")

    model_config = ConfigDict(populate_by_name=True)


class MessageResponse(BaseModel):
    message: str
