"""Custom SQLAlchemy column types."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import String
from sqlalchemy.types import TypeDecorator


class DecimalString(TypeDecorator):
    """Store ``Decimal`` values as text so they round-trip without float loss.

    SQLite has no native decimal type; a NUMERIC column would hand values back
    as floats. Comparisons on these columns happen in Python, not in SQL.
    """

    impl = String(40)
    cache_ok = True

    def process_bind_param(self, value: Any, dialect) -> Optional[str]:
        if value is None:
            return None
        if not isinstance(value, Decimal):
            value = Decimal(str(value))
        return str(value)

    def process_result_value(self, value: Any, dialect) -> Optional[Decimal]:
        if value is None:
            return None
        return Decimal(value)
