from rest_framework import serializers

from core.models import InventoryTransaction, Product, PurchaseOrder, Supplier

MONEY = dict(max_digits=14, decimal_places=2)


class HospitalQuerySerializer(serializers.Serializer):
    hospitalId = serializers.IntegerField(min_value=1, required=False)


class CategorySerializer(serializers.Serializer):
    hospitalId = serializers.IntegerField(min_value=1, required=False)
    name = serializers.CharField(max_length=100)
    description = serializers.CharField(required=False, allow_blank=True)
    parentId = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    sortOrder = serializers.IntegerField(required=False)
    isActive = serializers.BooleanField(required=False, default=True)


class CategoryUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    parentId = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    sortOrder = serializers.IntegerField(required=False)
    isActive = serializers.BooleanField(required=False)


class SupplierSerializer(serializers.Serializer):
    hospitalId = serializers.IntegerField(min_value=1, required=False)
    name = serializers.CharField(max_length=255)
    businessNumber = serializers.CharField(max_length=32, required=False, allow_blank=True)
    contactPerson = serializers.CharField(max_length=64, required=False, allow_blank=True)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    address = serializers.CharField(max_length=255, required=False, allow_blank=True)
    paymentTerms = serializers.CharField(max_length=100, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=[c for c, _ in Supplier.STATUS_CHOICES], required=False)


class SupplierUpdateSerializer(SupplierSerializer):
    name = serializers.CharField(max_length=255, required=False)


class SupplierListQuerySerializer(HospitalQuerySerializer):
    status = serializers.ChoiceField(choices=[c for c, _ in Supplier.STATUS_CHOICES], required=False)
    search = serializers.CharField(max_length=64, required=False)


class ProductSerializer(serializers.Serializer):
    hospitalId = serializers.IntegerField(min_value=1, required=False)
    name = serializers.CharField(max_length=255)
    type = serializers.ChoiceField(choices=[c for c, _ in Product.TYPE_CHOICES], required=False, default='OTHER')
    unit = serializers.ChoiceField(choices=[c for c, _ in Product.UNIT_CHOICES], required=False)
    categoryId = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    supplierId = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    barcode = serializers.CharField(max_length=64, required=False, allow_blank=True)
    costPrice = serializers.DecimalField(min_value=0, required=False, **MONEY)
    sellingPrice = serializers.DecimalField(min_value=0, required=False, **MONEY)
    minStockLevel = serializers.IntegerField(min_value=0, required=False)
    reorderPoint = serializers.IntegerField(min_value=0, required=False)
    isActive = serializers.BooleanField(required=False)


class ProductUpdateSerializer(ProductSerializer):
    name = serializers.CharField(max_length=255, required=False)
    # the type is part of the product code and cannot change
    type = None


class ProductListQuerySerializer(HospitalQuerySerializer):
    categoryId = serializers.IntegerField(min_value=1, required=False)
    supplierId = serializers.IntegerField(min_value=1, required=False)
    type = serializers.ChoiceField(choices=[c for c, _ in Product.TYPE_CHOICES], required=False)
    search = serializers.CharField(max_length=64, required=False)
    lowStock = serializers.BooleanField(required=False, default=False)
    page = serializers.IntegerField(min_value=1, required=False, default=1)
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False, default=20)


class StockListQuerySerializer(HospitalQuerySerializer):
    productId = serializers.IntegerField(min_value=1, required=False)
    lowStock = serializers.BooleanField(required=False, default=False)
    expiringSoon = serializers.BooleanField(required=False, default=False)


class StockAdjustSerializer(serializers.Serializer):
    hospitalId = serializers.IntegerField(min_value=1, required=False)
    productId = serializers.IntegerField(min_value=1)
    newQuantity = serializers.IntegerField(min_value=0)
    reason = serializers.CharField(max_length=255)
    lotNumber = serializers.CharField(max_length=64, required=False, allow_blank=True)


class TransactionCreateSerializer(serializers.Serializer):
    hospitalId = serializers.IntegerField(min_value=1, required=False)
    productId = serializers.IntegerField(min_value=1)
    type = serializers.ChoiceField(choices=[c for c, _ in InventoryTransaction.TYPE_CHOICES])
    quantity = serializers.IntegerField(min_value=1)
    unitCost = serializers.DecimalField(min_value=0, required=False, allow_null=True, **MONEY)
    lotNumber = serializers.CharField(max_length=64, required=False, allow_blank=True)
    expirationDate = serializers.DateField(required=False, allow_null=True)
    referenceType = serializers.CharField(max_length=32, required=False, allow_blank=True)
    referenceId = serializers.CharField(max_length=64, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)

    def validate_type(self, v):
        # adjustments go through stocks/adjust, which records an absolute count
        if v == InventoryTransaction.TYPE_ADJUSTMENT:
            raise serializers.ValidationError('재고 조정은 재고 조정 API를 사용해 주세요')
        return v


class TransactionListQuerySerializer(HospitalQuerySerializer):
    productId = serializers.IntegerField(min_value=1, required=False)
    type = serializers.ChoiceField(choices=[c for c, _ in InventoryTransaction.TYPE_CHOICES], required=False)
    startDate = serializers.DateField(required=False)
    endDate = serializers.DateField(required=False)
    page = serializers.IntegerField(min_value=1, required=False, default=1)
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False, default=20)


class PurchaseOrderItemSerializer(serializers.Serializer):
    productId = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1)
    unitPrice = serializers.DecimalField(min_value=0, **MONEY)


class PurchaseOrderCreateSerializer(serializers.Serializer):
    hospitalId = serializers.IntegerField(min_value=1, required=False)
    supplierId = serializers.IntegerField(min_value=1)
    orderDate = serializers.DateField(required=False, allow_null=True)
    expectedDate = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    internalNotes = serializers.CharField(required=False, allow_blank=True)
    draft = serializers.BooleanField(required=False, default=False)
    items = PurchaseOrderItemSerializer(many=True, allow_empty=False)


class PurchaseOrderUpdateSerializer(serializers.Serializer):
    supplierId = serializers.IntegerField(min_value=1, required=False)
    orderDate = serializers.DateField(required=False, allow_null=True)
    expectedDate = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    internalNotes = serializers.CharField(required=False, allow_blank=True)


class PurchaseOrderListQuerySerializer(HospitalQuerySerializer):
    status = serializers.ChoiceField(choices=[c for c, _ in PurchaseOrder.STATUS_CHOICES], required=False)
    supplierId = serializers.IntegerField(min_value=1, required=False)
    page = serializers.IntegerField(min_value=1, required=False, default=1)
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False, default=20)


class ReceiveLineSerializer(serializers.Serializer):
    itemId = serializers.IntegerField(min_value=1)
    receivedQuantity = serializers.IntegerField(min_value=1)
    lotNumber = serializers.CharField(max_length=64, required=False, allow_blank=True)
    expirationDate = serializers.DateField(required=False, allow_null=True)


class ReceiveSerializer(serializers.Serializer):
    items = ReceiveLineSerializer(many=True, allow_empty=False)
    notes = serializers.CharField(required=False, allow_blank=True)
