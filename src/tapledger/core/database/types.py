"""
Column types for unsigned 64-bit values.

Scores range over the full unsigned 64-bit integer space. PostgreSQL keeps
them in ``NUMERIC(20, 0)``. SQLite has no integer type wider than signed 64
bits and turns larger numeric values into REAL, so there a score is kept as
its canonical decimal text. Check constraints comparing such a column with
``0`` stay correct on both backends, since canonical text of a non-negative
number never sorts below ``'0'``.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import Numeric, String
from sqlalchemy.engine import Dialect
from sqlalchemy.types import TypeDecorator, TypeEngine

U64_MAX = 2**64 - 1
U64_DIGITS = 20


class UnsignedBigInteger(TypeDecorator):
    """Exact ``0 .. 2**64 - 1`` integer column, returned as ``int``."""

    impl = Numeric
    cache_ok = True

    def load_dialect_impl(self, dialect: Dialect) -> TypeEngine[Any]:
        if dialect.name == "sqlite":
            return dialect.type_descriptor(String(U64_DIGITS))
        return dialect.type_descriptor(Numeric(U64_DIGITS, 0))

    def process_bind_param(self, value: Optional[int], dialect: Dialect) -> Any:
        if value is None:
            return None
        if dialect.name == "sqlite":
            return str(int(value))
        return Decimal(int(value))

    def process_result_value(self, value: Any, dialect: Dialect) -> Optional[int]:
        if value is None:
            return None
        return int(value)
