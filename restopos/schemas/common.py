"""Shared schema types."""

from decimal import Decimal
from typing import Annotated

from pydantic import PlainSerializer

from restopos.services.billing import round_money

# Money goes over the wire as a plain JSON number with two decimals.
Money = Annotated[
    Decimal,
    PlainSerializer(lambda value: float(round_money(Decimal(value))), return_type=float, when_used="json"),
]

Percentage = Annotated[Decimal, PlainSerializer(lambda value: float(value), return_type=float, when_used="json")]
