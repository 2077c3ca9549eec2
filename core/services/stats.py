"""Cached statistics payloads shared by the stats views and ``refresh_stats``."""
from __future__ import annotations

from django.conf import settings
from django.core.cache import cache

from core.services.inventory import inventory_stats
from core.services.invoices import invoice_stats


def _ttl() -> int:
    return int(getattr(settings, 'STATS_CACHE_SECONDS', 300))


def invoice_stats_key(hospital_id: int, start_date=None, end_date=None) -> str:
    return f"stats:invoices:h={hospital_id}:s={start_date or ''}:e={end_date or ''}"


def inventory_stats_key(hospital_id: int) -> str:
    return f"stats:inventory:h={hospital_id}"


def cached_invoice_stats(hospital_id: int, start_date=None, end_date=None, *, refresh: bool = False) -> dict:
    ck = invoice_stats_key(hospital_id, start_date, end_date)
    if not refresh:
        cached = cache.get(ck)
        if cached is not None:
            return cached
    payload = {'ok': True, 'data': invoice_stats(hospital_id, start_date, end_date)}
    cache.set(ck, payload, _ttl())
    return payload


def cached_inventory_stats(hospital_id: int, *, refresh: bool = False) -> dict:
    ck = inventory_stats_key(hospital_id)
    if not refresh:
        cached = cache.get(ck)
        if cached is not None:
            return cached
    payload = {'ok': True, 'data': inventory_stats(hospital_id)}
    cache.set(ck, payload, _ttl())
    return payload
