"""Shared SQLAlchemy base declarative class and model imports."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for ORM models."""


# Import model modules so metadata is populated before create_all.
from restopos.models import bill as _bill  # noqa: E402,F401
from restopos.models import business as _business  # noqa: E402,F401
from restopos.models import inventory as _inventory  # noqa: E402,F401
from restopos.models import order as _order  # noqa: E402,F401
from restopos.models import product as _product  # noqa: E402,F401
from restopos.models import table as _table  # noqa: E402,F401
