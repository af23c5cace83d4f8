from __future__ import annotations

from decimal import Decimal

from sqlalchemy import Numeric
from sqlalchemy.types import TypeDecorator


class IdentityKey(TypeDecorator[int]):
    """Normalized identity stored as NUMERIC(20, 0).

    Twenty decimal digits do not fit into BIGINT, so the column is numeric and
    values travel through Python as plain ``int``.
    """

    impl = Numeric(20, 0)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return Decimal(int(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return int(value)
