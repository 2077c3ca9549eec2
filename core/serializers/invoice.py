from decimal import Decimal

from rest_framework import serializers

from core.models import Invoice, InvoiceItem, Payment

MONEY = dict(max_digits=14, decimal_places=2)


class InvoiceItemSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=[c for c, _ in InvoiceItem.TYPE_CHOICES], required=False, default='OTHER')
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True)
    quantity = serializers.IntegerField(min_value=1)
    unitPrice = serializers.DecimalField(min_value=0, **MONEY)
    discountRate = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=0, max_value=100, required=False, allow_null=True)
    discountAmount = serializers.DecimalField(min_value=0, required=False, allow_null=True, **MONEY)
    sortOrder = serializers.IntegerField(required=False, allow_null=True)


class InvoiceItemUpdateSerializer(InvoiceItemSerializer):
    type = serializers.ChoiceField(choices=[c for c, _ in InvoiceItem.TYPE_CHOICES], required=False)
    name = serializers.CharField(max_length=255, required=False)
    quantity = serializers.IntegerField(min_value=1, required=False)
    unitPrice = serializers.DecimalField(min_value=0, required=False, **MONEY)


class InvoiceCreateSerializer(serializers.Serializer):
    hospitalId = serializers.IntegerField(min_value=1)
    animalId = serializers.IntegerField(min_value=1)
    guardianId = serializers.IntegerField(min_value=1)
    dueDate = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    internalNotes = serializers.CharField(required=False, allow_blank=True)
    items = InvoiceItemSerializer(many=True, allow_empty=False)


class InvoiceUpdateSerializer(serializers.Serializer):
    dueDate = serializers.DateField(required=False, allow_null=True)
    status = serializers.ChoiceField(choices=[c for c, _ in Invoice.STATUS_CHOICES], required=False)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    internalNotes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class InvoiceListQuerySerializer(serializers.Serializer):
    hospitalId = serializers.IntegerField(min_value=1, required=False)
    guardianId = serializers.IntegerField(min_value=1, required=False)
    animalId = serializers.IntegerField(min_value=1, required=False)
    status = serializers.ChoiceField(choices=[c for c, _ in Invoice.STATUS_CHOICES], required=False)
    startDate = serializers.DateField(required=False)
    endDate = serializers.DateField(required=False)
    page = serializers.IntegerField(min_value=1, required=False, default=1)
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False, default=20)


class InvoiceStatsQuerySerializer(serializers.Serializer):
    hospitalId = serializers.IntegerField(min_value=1, required=False)
    startDate = serializers.DateField(required=False)
    endDate = serializers.DateField(required=False)


class PaymentCreateSerializer(serializers.Serializer):
    invoiceId = serializers.IntegerField(min_value=1)
    amount = serializers.DecimalField(min_value=Decimal('0.01'), **MONEY)
    method = serializers.ChoiceField(choices=[c for c, _ in Payment.METHOD_CHOICES])
    cardNumber = serializers.CharField(max_length=32, required=False, allow_blank=True)
    cardCompany = serializers.CharField(max_length=64, required=False, allow_blank=True)
    cardApprovalNo = serializers.CharField(max_length=64, required=False, allow_blank=True)
    cardInstallment = serializers.IntegerField(min_value=0, max_value=36, required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)


class RefundSerializer(serializers.Serializer):
    amount = serializers.DecimalField(min_value=Decimal('0.01'), **MONEY)
    reason = serializers.CharField(max_length=255)


class PaymentListQuerySerializer(serializers.Serializer):
    hospitalId = serializers.IntegerField(min_value=1, required=False)
    invoiceId = serializers.IntegerField(min_value=1, required=False)
    status = serializers.ChoiceField(choices=[c for c, _ in Payment.STATUS_CHOICES], required=False)
    method = serializers.ChoiceField(choices=[c for c, _ in Payment.METHOD_CHOICES], required=False)
    startDate = serializers.DateField(required=False)
    endDate = serializers.DateField(required=False)
    page = serializers.IntegerField(min_value=1, required=False, default=1)
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False, default=20)
