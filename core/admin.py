"""
Django admin registrations for the core models.

Registering the models here lets superusers inspect billing and
inventory data through ``/admin/``.  Inventory transactions are
append-only, so their admin is read-only.
"""

from django.contrib import admin

from .models import (
    AuditEvent,
    Animal,
    AnimalGuardian,
    Hospital,
    HospitalStaff,
    InventoryStock,
    InventoryTransaction,
    Invoice,
    InvoiceItem,
    Notification,
    Payment,
    Product,
    ProductCategory,
    PurchaseOrder,
    PurchaseOrderItem,
    Supplier,
    User,
)


@admin.register(Hospital)
class HospitalAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'business_number', 'status', 'created_at')
    list_filter = ('status',)
    search_fields = ('name', 'business_number')


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'role', 'hospital', 'is_staff', 'is_superuser')
    list_filter = ('role', 'hospital')
    search_fields = ('username', 'first_name', 'phone')


@admin.register(HospitalStaff)
class HospitalStaffAdmin(admin.ModelAdmin):
    list_display = ('hospital', 'user', 'position', 'is_active')
    list_filter = ('position', 'is_active')


class AnimalGuardianInline(admin.TabularInline):
    model = AnimalGuardian
    extra = 0


@admin.register(Animal)
class AnimalAdmin(admin.ModelAdmin):
    list_display = ('code', 'name', 'species', 'hospital', 'is_active')
    list_filter = ('species', 'is_active')
    search_fields = ('code', 'name', 'microchip_id')
    inlines = [AnimalGuardianInline]


class InvoiceItemInline(admin.TabularInline):
    model = InvoiceItem
    extra = 0


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ('invoice_number', 'hospital', 'guardian', 'status', 'total_amount', 'paid_amount', 'due_amount')
    list_filter = ('status', 'hospital')
    search_fields = ('invoice_number',)
    inlines = [InvoiceItemInline]


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ('payment_number', 'invoice', 'amount', 'method', 'status', 'paid_at')
    list_filter = ('status', 'method')
    search_fields = ('payment_number',)


@admin.register(ProductCategory)
class ProductCategoryAdmin(admin.ModelAdmin):
    list_display = ('id', 'hospital', 'name', 'parent', 'is_active')


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ('code', 'name', 'hospital', 'status')
    search_fields = ('code', 'name')


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ('code', 'name', 'type', 'hospital', 'min_stock_level', 'is_active')
    list_filter = ('type', 'is_active')
    search_fields = ('code', 'name', 'barcode')


@admin.register(InventoryStock)
class InventoryStockAdmin(admin.ModelAdmin):
    list_display = ('hospital', 'product', 'lot_number', 'quantity', 'available_qty', 'expiration_date')


@admin.register(InventoryTransaction)
class InventoryTransactionAdmin(admin.ModelAdmin):
    list_display = ('transaction_number', 'product', 'type', 'quantity', 'previous_qty', 'current_qty', 'processed_at')
    list_filter = ('type',)

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class PurchaseOrderItemInline(admin.TabularInline):
    model = PurchaseOrderItem
    extra = 0


@admin.register(PurchaseOrder)
class PurchaseOrderAdmin(admin.ModelAdmin):
    list_display = ('order_number', 'hospital', 'supplier', 'status', 'total_amount', 'created_at')
    list_filter = ('status',)
    inlines = [PurchaseOrderItemInline]


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ('user', 'type', 'title', 'is_read', 'created_at')
    list_filter = ('type', 'is_read')


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('action', 'user', 'object_type', 'object_id', 'created_at')
    list_filter = ('action',)
