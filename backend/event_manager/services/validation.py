"""Identifier parsing, time normalisation and paging helpers shared by services."""
import math
import uuid
from datetime import datetime, timezone
from typing import Optional

from fastapi import HTTPException, status


def parse_id(raw: Optional[str], label: str) -> str:
    """Return the canonical form of a UUID identifier or raise 400."""
    try:
        return str(uuid.UUID(str(raw)))
    except (TypeError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {label} ID format",
        )


def to_utc(value: datetime) -> datetime:
    """Aware UTC datetime; naive values are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_past(value: datetime) -> bool:
    return to_utc(value) < datetime.now(timezone.utc)


def total_pages(total: int, page_size: int) -> int:
    return math.ceil(total / page_size) if page_size else 0
