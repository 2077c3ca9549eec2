"""
Per-day document numbering (``INV-20250101-0001``).

Numbers come from a ``DailySequence`` row keyed by (key, date).  The
row is locked with ``select_for_update`` for the remainder of the
caller's transaction so two concurrent requests can never draw the
same value.
"""
from __future__ import annotations

import datetime as dt
from typing import Optional

from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from core.models import DailySequence

INVOICE = 'invoice'
PAYMENT = 'payment'
PURCHASE_ORDER = 'purchase_order'
INVENTORY_TRANSACTION = 'inventory_transaction'
ANIMAL = 'animal'


def date_key(day: Optional[dt.date] = None) -> str:
    return (day or timezone.localdate()).strftime('%Y%m%d')


@transaction.atomic
def next_value(key: str, day: str) -> int:
    """Increment and return the counter for ``(key, day)``; the first value is 1."""
    row = DailySequence.objects.select_for_update().filter(key=key, date=day).first()
    if row is None:
        # two requests may race to create the row; the loser re-fetches with lock
        try:
            with transaction.atomic():
                DailySequence.objects.create(key=key, date=day, value=0)
        except IntegrityError:
            pass
        row = DailySequence.objects.select_for_update().get(key=key, date=day)
    DailySequence.objects.filter(pk=row.pk).update(value=F('value') + 1)
    row.refresh_from_db(fields=['value'])
    return row.value


def next_number(key: str, prefix: str, width: int = 4, on: Optional[dt.date] = None) -> str:
    day = date_key(on)
    seq = next_value(key, day)
    return f"{prefix}-{day}-{seq:0{width}d}"
