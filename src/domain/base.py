"""Shared base for domain entities"""

from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import BigInteger, Integer
from sqlmodel import SQLModel


# BIGINT primary keys only autoincrement on SQLite when declared as INTEGER
IdType = BigInteger().with_variant(Integer(), "sqlite")


def utc_now() -> datetime:
    """Naive UTC timestamp (stored without tzinfo)"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Convert an aware timestamp to the naive UTC form the tables store"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class BaseModel(SQLModel):
    pass
