"""Small helpers shared by the billing and inventory services."""
from __future__ import annotations

import datetime as dt
import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

import bleach
from django.utils import timezone

CENT = Decimal('0.01')
ZERO = Decimal('0.00')


def money(value) -> Decimal:
    """Coerce to a Decimal rounded to two places (half-up)."""
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def clean_text(value: Optional[str]) -> str:
    return bleach.clean((value or '').strip(), strip=True)


def page_meta(total: int, page: int, limit: int) -> dict:
    return {
        'total': total,
        'page': page,
        'limit': limit,
        'totalPages': math.ceil(total / limit) if limit else 0,
    }


def paginate(qs, page: int = 1, limit: int = 20):
    """Return ``(rows, total)`` for one page of a queryset."""
    total = qs.count()
    start = (page - 1) * limit
    return list(qs[start:start + limit]), total


def day_start(d: dt.date) -> dt.datetime:
    return timezone.make_aware(dt.datetime.combine(d, dt.time.min))


def day_end(d: dt.date) -> dt.datetime:
    return timezone.make_aware(dt.datetime.combine(d, dt.time.max))


def ts(value) -> Optional[str]:
    return value.isoformat() if value else None
