"""
Database models for the PetMedi backend.

These models capture the concepts of a veterinary hospital: staff and
guardians (users), hospitals, animals, the billing ledger (invoices,
items and payments), the product catalog, the inventory ledger and
purchase orders.  Monetary values are stored as decimals with two
places; stock quantities are integers.
"""
from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils import timezone


def _money(**kwargs):
    return models.DecimalField(max_digits=14, decimal_places=2, **kwargs)


class Hospital(models.Model):
    """A veterinary hospital (tenant).  Everything billable belongs to one."""
    STATUS_PENDING = 'PENDING'
    STATUS_ACTIVE = 'ACTIVE'
    STATUS_INACTIVE = 'INACTIVE'
    STATUS_SUSPENDED = 'SUSPENDED'
    STATUS_CHOICES = (
        (STATUS_PENDING, 'Pending'),
        (STATUS_ACTIVE, 'Active'),
        (STATUS_INACTIVE, 'Inactive'),
        (STATUS_SUSPENDED, 'Suspended'),
    )

    name = models.CharField(max_length=255)
    business_number = models.CharField(max_length=32, unique=True)
    license_number = models.CharField(max_length=64, blank=True)
    phone = models.CharField(max_length=32, blank=True)
    email = models.EmailField(blank=True)
    address = models.CharField(max_length=255, blank=True)
    description = models.TextField(blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.name} ({self.business_number})"


class User(AbstractUser):
    """Custom user model with a role and optional hospital binding.

    Staff roles ('hospital_admin', 'vet', 'staff') are bound to the
    hospital they work at; guardians are not bound to any hospital.
    A more detailed membership (with a position) is modeled by
    :class:`HospitalStaff`.
    """
    ROLE_CHOICES = [
        ('super', 'Super Administrator'),
        ('hospital_admin', 'Hospital Administrator'),
        ('vet', 'Veterinarian'),
        ('staff', 'Staff'),
        ('guardian', 'Guardian'),
    ]
    role = models.CharField(max_length=16, choices=ROLE_CHOICES, default='guardian')
    hospital = models.ForeignKey(
        Hospital, null=True, blank=True, on_delete=models.SET_NULL, related_name='users'
    )
    phone = models.CharField(max_length=32, blank=True)

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class HospitalStaff(models.Model):
    """Links a user to a hospital with a position inside that hospital."""
    POSITION_OWNER = 'OWNER'
    POSITION_MANAGER = 'MANAGER'
    POSITION_VET = 'VET'
    POSITION_STAFF = 'STAFF'
    POSITION_CHOICES = [
        (POSITION_OWNER, 'Owner'),
        (POSITION_MANAGER, 'Manager'),
        (POSITION_VET, 'Veterinarian'),
        (POSITION_STAFF, 'Staff'),
    ]
    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='staff')
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='staff_memberships')
    position = models.CharField(max_length=16, choices=POSITION_CHOICES, default=POSITION_STAFF)
    is_active = models.BooleanField(default=True)
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = [('hospital', 'user')]

    def __str__(self) -> str:
        return f"{self.user} at {self.hospital} as {self.position}"


class Animal(models.Model):
    """An animal patient, identified by a generated code such as ``D-20200315-0000001``."""
    SPECIES_CHOICES = [
        ('DOG', 'Dog'),
        ('CAT', 'Cat'),
        ('BIRD', 'Bird'),
        ('RABBIT', 'Rabbit'),
        ('HAMSTER', 'Hamster'),
        ('FISH', 'Fish'),
        ('REPTILE', 'Reptile'),
        ('OTHER', 'Other'),
    ]
    GENDER_CHOICES = [
        ('MALE', 'Male'),
        ('FEMALE', 'Female'),
        ('UNKNOWN', 'Unknown'),
    ]
    code = models.CharField(max_length=32, unique=True)
    name = models.CharField(max_length=100)
    species = models.CharField(max_length=16, choices=SPECIES_CHOICES)
    breed = models.CharField(max_length=100, blank=True)
    gender = models.CharField(max_length=8, choices=GENDER_CHOICES, default='UNKNOWN')
    birth_date = models.DateField(null=True, blank=True)
    weight = models.DecimalField(max_digits=7, decimal_places=2, null=True, blank=True)
    color = models.CharField(max_length=50, blank=True)
    microchip_id = models.CharField(max_length=64, blank=True)
    is_neutered = models.BooleanField(default=False)
    notes = models.TextField(blank=True)
    # registering hospital
    hospital = models.ForeignKey(
        Hospital, null=True, blank=True, on_delete=models.SET_NULL, related_name='animals'
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.name} ({self.code})"


class AnimalGuardian(models.Model):
    """Links an animal to a guardian; exactly one link is primary."""
    animal = models.ForeignKey(Animal, on_delete=models.CASCADE, related_name='guardians')
    guardian = models.ForeignKey(User, on_delete=models.CASCADE, related_name='animal_links')
    is_primary = models.BooleanField(default=False)
    relation = models.CharField(max_length=32, blank=True, default='보호자')

    class Meta:
        unique_together = [('animal', 'guardian')]

    def __str__(self) -> str:
        return f"{self.guardian_id} -> {self.animal_id}"


class DailySequence(models.Model):
    """Per-day counter backing document numbers (``INV-20250101-0001``)."""
    key = models.CharField(max_length=32)
    date = models.CharField(max_length=8, help_text="YYYYMMDD")
    value = models.PositiveIntegerField(default=0)

    class Meta:
        unique_together = [('key', 'date')]

    def __str__(self) -> str:
        return f"{self.key}@{self.date}={self.value}"


# ---------------------------------------------------------------------------
# Billing
# ---------------------------------------------------------------------------

class Invoice(models.Model):
    STATUS_DRAFT = 'DRAFT'
    STATUS_PENDING = 'PENDING'
    STATUS_PARTIAL = 'PARTIAL'
    STATUS_PAID = 'PAID'
    STATUS_OVERDUE = 'OVERDUE'
    STATUS_CANCELLED = 'CANCELLED'
    STATUS_REFUNDED = 'REFUNDED'
    STATUS_CHOICES = (
        (STATUS_DRAFT, 'Draft'),
        (STATUS_PENDING, 'Pending'),
        (STATUS_PARTIAL, 'Partially paid'),
        (STATUS_PAID, 'Paid'),
        (STATUS_OVERDUE, 'Overdue'),
        (STATUS_CANCELLED, 'Cancelled'),
        (STATUS_REFUNDED, 'Refunded'),
    )
    # Items cannot be added/edited/removed and payments cannot be applied
    LOCKED_STATUSES = (STATUS_PAID, STATUS_REFUNDED, STATUS_CANCELLED)
    # Header updates are refused once settled
    SETTLED_STATUSES = (STATUS_PAID, STATUS_REFUNDED)
    # Statuses an operator may set by hand; the rest follow payments
    MANUAL_STATUSES = (STATUS_DRAFT, STATUS_PENDING, STATUS_OVERDUE, STATUS_CANCELLED)

    invoice_number = models.CharField(max_length=32, unique=True)
    hospital = models.ForeignKey(Hospital, on_delete=models.PROTECT, related_name='invoices')
    animal = models.ForeignKey(Animal, on_delete=models.PROTECT, related_name='invoices')
    guardian = models.ForeignKey(User, on_delete=models.PROTECT, related_name='invoices')
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_DRAFT, db_index=True)

    subtotal = _money(default=0)
    discount_amount = _money(default=0)
    total_amount = _money(default=0)
    paid_amount = _money(default=0)
    due_amount = _money(default=0)

    issue_date = models.DateTimeField(default=timezone.now, db_index=True)
    due_date = models.DateField(null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)
    internal_notes = models.TextField(blank=True)
    created_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='invoices_created'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['hospital', 'status', 'issue_date'], name='invoice_hosp_status_issue'),
            models.Index(fields=['guardian', 'issue_date'], name='invoice_guardian_issue'),
        ]

    def __str__(self) -> str:
        return f"{self.invoice_number} ({self.status})"


class InvoiceItem(models.Model):
    TYPE_CHOICES = [
        ('CONSULTATION', 'Consultation'),
        ('SURGERY', 'Surgery'),
        ('MEDICATION', 'Medication'),
        ('INJECTION', 'Injection'),
        ('LAB_TEST', 'Lab test'),
        ('IMAGING', 'Imaging'),
        ('HOSPITALIZATION', 'Hospitalization'),
        ('GROOMING', 'Grooming'),
        ('VACCINATION', 'Vaccination'),
        ('SUPPLIES', 'Supplies'),
        ('DISCOUNT', 'Discount'),
        ('OTHER', 'Other'),
    ]
    invoice = models.ForeignKey(Invoice, on_delete=models.CASCADE, related_name='items')
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='OTHER')
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    quantity = models.PositiveIntegerField(default=1)
    unit_price = _money(default=0)
    amount = _money(default=0)
    discount_rate = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    discount_amount = _money(default=0)
    final_amount = _money(default=0)
    sort_order = models.IntegerField(default=0)

    class Meta:
        ordering = ['sort_order', 'id']

    def __str__(self) -> str:
        return f"{self.type}: {self.name}"


class Payment(models.Model):
    METHOD_CHOICES = [
        ('CASH', 'Cash'),
        ('CARD', 'Card'),
        ('TRANSFER', 'Bank transfer'),
        ('MOBILE', 'Mobile'),
        ('INSURANCE', 'Insurance'),
        ('POINT', 'Point'),
        ('OTHER', 'Other'),
    ]
    STATUS_PENDING = 'PENDING'
    STATUS_COMPLETED = 'COMPLETED'
    STATUS_FAILED = 'FAILED'
    STATUS_CANCELLED = 'CANCELLED'
    STATUS_REFUNDED = 'REFUNDED'
    STATUS_CHOICES = (
        (STATUS_PENDING, 'Pending'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_FAILED, 'Failed'),
        (STATUS_CANCELLED, 'Cancelled'),
        (STATUS_REFUNDED, 'Refunded'),
    )

    payment_number = models.CharField(max_length=32, unique=True)
    invoice = models.ForeignKey(Invoice, on_delete=models.PROTECT, related_name='payments')
    hospital = models.ForeignKey(Hospital, on_delete=models.PROTECT, related_name='payments')
    amount = _money()
    method = models.CharField(max_length=16, choices=METHOD_CHOICES)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    card_number = models.CharField(max_length=32, blank=True)
    card_company = models.CharField(max_length=64, blank=True)
    card_approval_no = models.CharField(max_length=64, blank=True)
    card_installment = models.PositiveSmallIntegerField(null=True, blank=True)
    notes = models.TextField(blank=True)
    paid_at = models.DateTimeField(null=True, blank=True, db_index=True)
    refund_amount = _money(null=True, blank=True)
    refund_reason = models.CharField(max_length=255, blank=True)
    refunded_at = models.DateTimeField(null=True, blank=True)
    processed_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='payments_processed'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"{self.payment_number} {self.amount} ({self.status})"


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

class ProductCategory(models.Model):
    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='product_categories')
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    parent = models.ForeignKey(
        'self', null=True, blank=True, on_delete=models.PROTECT, related_name='children'
    )
    sort_order = models.IntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return self.name


class Supplier(models.Model):
    STATUS_CHOICES = [
        ('ACTIVE', 'Active'),
        ('INACTIVE', 'Inactive'),
        ('SUSPENDED', 'Suspended'),
    ]
    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='suppliers')
    code = models.CharField(max_length=16)
    name = models.CharField(max_length=255)
    business_number = models.CharField(max_length=32, blank=True)
    contact_person = models.CharField(max_length=64, blank=True)
    phone = models.CharField(max_length=32, blank=True)
    email = models.EmailField(blank=True)
    address = models.CharField(max_length=255, blank=True)
    payment_terms = models.CharField(max_length=100, blank=True)
    notes = models.TextField(blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default='ACTIVE')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = [('hospital', 'code')]

    def __str__(self) -> str:
        return f"{self.name} ({self.code})"


class Product(models.Model):
    TYPE_CHOICES = [
        ('MEDICATION', 'Medication'),
        ('VACCINE', 'Vaccine'),
        ('SUPPLIES', 'Supplies'),
        ('EQUIPMENT', 'Equipment'),
        ('FOOD', 'Food'),
        ('SUPPLEMENT', 'Supplement'),
        ('OTHER', 'Other'),
    ]
    UNIT_CHOICES = [(u, u) for u in (
        'EA', 'BOX', 'PACK', 'ML', 'L', 'MG', 'G', 'KG', 'DOSE', 'VIAL', 'AMPULE', 'BOTTLE', 'TUBE', 'SHEET',
    )]
    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='products')
    category = models.ForeignKey(
        ProductCategory, null=True, blank=True, on_delete=models.SET_NULL, related_name='products'
    )
    supplier = models.ForeignKey(
        Supplier, null=True, blank=True, on_delete=models.SET_NULL, related_name='products'
    )
    code = models.CharField(max_length=16)
    name = models.CharField(max_length=255)
    type = models.CharField(max_length=16, choices=TYPE_CHOICES, default='OTHER')
    unit = models.CharField(max_length=8, choices=UNIT_CHOICES, default='EA')
    barcode = models.CharField(max_length=64, blank=True)
    cost_price = _money(default=0)
    selling_price = _money(default=0)
    min_stock_level = models.PositiveIntegerField(default=0)
    reorder_point = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = [('hospital', 'code')]

    def __str__(self) -> str:
        return f"{self.name} ({self.code})"


# ---------------------------------------------------------------------------
# Inventory ledger
# ---------------------------------------------------------------------------

class InventoryStock(models.Model):
    """Current quantity of one (hospital, product, lot).  Lot '' means 'no lot'."""
    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='stocks')
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='stocks')
    lot_number = models.CharField(max_length=64, blank=True, default='')
    quantity = models.IntegerField(default=0)
    reserved_qty = models.IntegerField(default=0)
    available_qty = models.IntegerField(default=0)
    expiration_date = models.DateField(null=True, blank=True)
    last_counted_at = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = [('hospital', 'product', 'lot_number')]

    def __str__(self) -> str:
        return f"stock p={self.product_id} lot={self.lot_number or '-'} q={self.quantity}"


class InventoryTransaction(models.Model):
    """Append-only record of a single stock movement."""
    TYPE_PURCHASE = 'PURCHASE'
    TYPE_SALE = 'SALE'
    TYPE_ADJUSTMENT = 'ADJUSTMENT'
    TYPE_RETURN = 'RETURN'
    TYPE_TRANSFER_IN = 'TRANSFER_IN'
    TYPE_TRANSFER_OUT = 'TRANSFER_OUT'
    TYPE_INITIAL = 'INITIAL'
    TYPE_EXPIRED = 'EXPIRED'
    TYPE_DAMAGED = 'DAMAGED'
    TYPE_CHOICES = [
        (TYPE_PURCHASE, 'Purchase'),
        (TYPE_SALE, 'Sale'),
        (TYPE_ADJUSTMENT, 'Adjustment'),
        (TYPE_RETURN, 'Return'),
        (TYPE_TRANSFER_IN, 'Transfer in'),
        (TYPE_TRANSFER_OUT, 'Transfer out'),
        (TYPE_INITIAL, 'Initial'),
        (TYPE_EXPIRED, 'Expired'),
        (TYPE_DAMAGED, 'Damaged'),
    ]
    INBOUND_TYPES = (TYPE_PURCHASE, TYPE_RETURN, TYPE_TRANSFER_IN, TYPE_INITIAL)

    transaction_number = models.CharField(max_length=32, unique=True)
    hospital = models.ForeignKey(Hospital, on_delete=models.PROTECT, related_name='inventory_transactions')
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name='transactions')
    type = models.CharField(max_length=16, choices=TYPE_CHOICES)
    # signed: positive in, negative out
    quantity = models.IntegerField()
    previous_qty = models.IntegerField()
    current_qty = models.IntegerField()
    unit_cost = _money(null=True, blank=True)
    total_cost = _money(null=True, blank=True)
    lot_number = models.CharField(max_length=64, blank=True, default='')
    expiration_date = models.DateField(null=True, blank=True)
    reference_type = models.CharField(max_length=32, blank=True)
    reference_id = models.CharField(max_length=64, blank=True)
    notes = models.TextField(blank=True)
    processed_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='inventory_transactions'
    )
    processed_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        indexes = [
            models.Index(fields=['hospital', 'product', 'processed_at'], name='invtxn_hosp_prod_at'),
            models.Index(fields=['reference_type', 'reference_id'], name='invtxn_reference'),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise RuntimeError('inventory transactions are append-only')
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise RuntimeError('inventory transactions are append-only')

    def __str__(self) -> str:
        return f"{self.transaction_number} {self.type} {self.quantity:+d}"


# ---------------------------------------------------------------------------
# Purchase orders
# ---------------------------------------------------------------------------

class PurchaseOrder(models.Model):
    STATUS_DRAFT = 'DRAFT'
    STATUS_PENDING = 'PENDING'
    STATUS_APPROVED = 'APPROVED'
    STATUS_ORDERED = 'ORDERED'
    STATUS_PARTIAL = 'PARTIAL'
    STATUS_RECEIVED = 'RECEIVED'
    STATUS_CANCELLED = 'CANCELLED'
    STATUS_CHOICES = (
        (STATUS_DRAFT, 'Draft'),
        (STATUS_PENDING, 'Pending approval'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_ORDERED, 'Ordered'),
        (STATUS_PARTIAL, 'Partially received'),
        (STATUS_RECEIVED, 'Received'),
        (STATUS_CANCELLED, 'Cancelled'),
    )
    EDITABLE_STATUSES = (STATUS_DRAFT, STATUS_PENDING)
    RECEIVABLE_STATUSES = (STATUS_APPROVED, STATUS_ORDERED, STATUS_PARTIAL)
    OPEN_STATUSES = (STATUS_PENDING, STATUS_APPROVED, STATUS_ORDERED)

    order_number = models.CharField(max_length=32, unique=True)
    hospital = models.ForeignKey(Hospital, on_delete=models.PROTECT, related_name='purchase_orders')
    supplier = models.ForeignKey(Supplier, on_delete=models.PROTECT, related_name='purchase_orders')
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    order_date = models.DateField(null=True, blank=True)
    expected_date = models.DateField(null=True, blank=True)
    received_date = models.DateTimeField(null=True, blank=True)
    subtotal = _money(default=0)
    tax_amount = _money(default=0)
    total_amount = _money(default=0)
    notes = models.TextField(blank=True)
    internal_notes = models.TextField(blank=True)
    created_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='purchase_orders_created'
    )
    approved_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='purchase_orders_approved'
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.order_number} ({self.status})"


class PurchaseOrderItem(models.Model):
    order = models.ForeignKey(PurchaseOrder, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name='purchase_order_items')
    quantity = models.PositiveIntegerField()
    unit_price = _money(default=0)
    amount = _money(default=0)
    received_qty = models.PositiveIntegerField(default=0)
    lot_number = models.CharField(max_length=64, blank=True)
    expiration_date = models.DateField(null=True, blank=True)
    sort_order = models.IntegerField(default=0)

    class Meta:
        ordering = ['sort_order', 'id']

    @property
    def remaining_qty(self) -> int:
        return max(0, self.quantity - self.received_qty)

    def __str__(self) -> str:
        return f"{self.product_id} x{self.quantity} (recv {self.received_qty})"


# ---------------------------------------------------------------------------
# Notifications & audit
# ---------------------------------------------------------------------------

class Notification(models.Model):
    TYPE_PAYMENT_COMPLETED = 'PAYMENT_COMPLETED'
    TYPE_PAYMENT_REFUNDED = 'PAYMENT_REFUNDED'
    TYPE_PURCHASE_ORDER_RECEIVED = 'PURCHASE_ORDER_RECEIVED'
    TYPE_LOW_STOCK_ALERT = 'LOW_STOCK_ALERT'
    TYPE_CUSTOM = 'CUSTOM'
    TYPE_CHOICES = [
        (TYPE_PAYMENT_COMPLETED, 'Payment completed'),
        (TYPE_PAYMENT_REFUNDED, 'Payment refunded'),
        (TYPE_PURCHASE_ORDER_RECEIVED, 'Purchase order received'),
        (TYPE_LOW_STOCK_ALERT, 'Low stock alert'),
        (TYPE_CUSTOM, 'Custom'),
    ]
    hospital = models.ForeignKey(
        Hospital, null=True, blank=True, on_delete=models.CASCADE, related_name='notifications'
    )
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='notifications')
    type = models.CharField(max_length=32, choices=TYPE_CHOICES, default=TYPE_CUSTOM)
    title = models.CharField(max_length=255)
    message = models.TextField(blank=True)
    data = models.JSONField(default=dict, blank=True)
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [models.Index(fields=['user', 'is_read', 'created_at'], name='notif_user_read_created')]

    def __str__(self) -> str:
        return f"notif {self.type} -> {self.user_id}"


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.IntegerField(blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='audit_action_created'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='audit_object_created'),
        ]
