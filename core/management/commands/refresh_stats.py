from django.core.management.base import BaseCommand
from django.utils import timezone
from channels.layers import get_channel_layer
from asgiref.sync import async_to_sync

from core.models import Hospital
from core.services.stats import (
    cached_inventory_stats,
    cached_invoice_stats,
    inventory_stats_key,
    invoice_stats_key,
)


class Command(BaseCommand):
    help = "Warm the invoice/inventory statistics caches; broadcast WebSocket refresh event."

    def add_arguments(self, parser):
        parser.add_argument('--hospital', type=int, help='Only refresh this hospital id')

    def handle(self, *args, **options):
        now = timezone.now()
        keys_refreshed = []

        qs = Hospital.objects.filter(status=Hospital.STATUS_ACTIVE)
        if options.get('hospital'):
            qs = qs.filter(id=options['hospital'])

        for hid in qs.values_list('id', flat=True):
            cached_invoice_stats(hid, refresh=True)
            keys_refreshed.append(invoice_stats_key(hid))
            cached_inventory_stats(hid, refresh=True)
            keys_refreshed.append(inventory_stats_key(hid))

        channel_layer = get_channel_layer()
        if channel_layer is not None:
            event = {"type": "broadcast.refresh", "version": int(now.timestamp()), "ts": now.isoformat(), "keys": keys_refreshed[:50]}
            async_to_sync(channel_layer.group_send)("updates", event)

        self.stdout.write(self.style.SUCCESS(f"Refreshed {len(keys_refreshed)} keys at {now}"))
