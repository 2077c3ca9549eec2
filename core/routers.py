"""
URL mappings for the PetMedi API.

Paths carry no trailing slash; ``APPEND_SLASH`` is off in settings so
the front-end must call them exactly as written here.
"""
from django.urls import path, include

from .auth_views import jwt_logout_view, jwt_refresh_view, login_view, me_view
from .views import animals, health, hospitals, inventory, invoices, notifications, payments, purchase_orders


urlpatterns = [
    # /metrics
    path('', include('django_prometheus.urls')),
    path('healthz', health.healthz, name='healthz'),

    # Authentication
    path('api/auth/login', login_view, name='login_view'),
    path('api/auth/refresh', jwt_refresh_view, name='jwt_refresh_view'),
    path('api/auth/logout', jwt_logout_view, name='jwt_logout_view'),
    path('api/auth/me', me_view, name='me_view'),

    # Hospitals & staff
    path('api/hospitals', hospitals.hospitals, name='hospitals'),
    path('api/hospitals/<int:hospital_id>', hospitals.hospital_detail, name='hospital_detail'),
    path('api/hospitals/<int:hospital_id>/staff', hospitals.hospital_staff, name='hospital_staff'),
    path('api/hospitals/<int:hospital_id>/staff/<int:staff_id>', hospitals.hospital_staff_detail,
         name='hospital_staff_detail'),

    # Animals
    path('api/animals', animals.animals, name='animals'),
    path('api/animals/<int:animal_id>', animals.animal_detail, name='animal_detail'),
    path('api/animals/code/<str:code>', animals.animal_by_code, name='animal_by_code'),

    # Invoices & payments
    path('api/invoices', invoices.invoices, name='invoices'),
    path('api/invoices/stats', invoices.invoice_stats, name='invoice_stats'),
    path('api/invoices/payments', payments.payments, name='payments'),
    path('api/invoices/payments/list', payments.payment_list, name='payment_list'),
    path('api/invoices/payments/<int:payment_id>/refund', payments.payment_refund, name='payment_refund'),
    path('api/invoices/items/<int:item_id>', invoices.invoice_item_detail, name='invoice_item_detail'),
    path('api/invoices/<int:invoice_id>', invoices.invoice_detail, name='invoice_detail'),
    path('api/invoices/<int:invoice_id>/items', invoices.invoice_items, name='invoice_items'),

    # Inventory catalog
    path('api/inventory/categories', inventory.categories, name='categories'),
    path('api/inventory/categories/<int:category_id>', inventory.category_detail, name='category_detail'),
    path('api/inventory/suppliers', inventory.suppliers, name='suppliers'),
    path('api/inventory/suppliers/<int:supplier_id>', inventory.supplier_detail, name='supplier_detail'),
    path('api/inventory/products', inventory.products, name='products'),
    path('api/inventory/products/<int:product_id>', inventory.product_detail, name='product_detail'),

    # Stock & ledger
    path('api/inventory/stocks', inventory.stocks, name='stocks'),
    path('api/inventory/stocks/adjust', inventory.stock_adjust, name='stock_adjust'),
    path('api/inventory/transactions', inventory.transactions, name='transactions'),
    path('api/inventory/stats', inventory.inventory_stats, name='inventory_stats'),

    # Purchase orders
    path('api/inventory/purchase-orders', purchase_orders.purchase_orders, name='purchase_orders'),
    path('api/inventory/purchase-orders/<int:order_id>', purchase_orders.purchase_order_detail,
         name='purchase_order_detail'),
    path('api/inventory/purchase-orders/<int:order_id>/submit', purchase_orders.purchase_order_submit,
         name='purchase_order_submit'),
    path('api/inventory/purchase-orders/<int:order_id>/approve', purchase_orders.purchase_order_approve,
         name='purchase_order_approve'),
    path('api/inventory/purchase-orders/<int:order_id>/order', purchase_orders.purchase_order_mark_ordered,
         name='purchase_order_mark_ordered'),
    path('api/inventory/purchase-orders/<int:order_id>/receive', purchase_orders.purchase_order_receive,
         name='purchase_order_receive'),
    path('api/inventory/purchase-orders/<int:order_id>/cancel', purchase_orders.purchase_order_cancel,
         name='purchase_order_cancel'),

    # Notifications
    path('api/notifications', notifications.notifications, name='notifications'),
    path('api/notifications/unread-count', notifications.notifications_unread_count,
         name='notifications_unread_count'),
    path('api/notifications/read-all', notifications.notifications_read_all, name='notifications_read_all'),
    path('api/notifications/<int:notification_id>/read', notifications.notification_read,
         name='notification_read'),
]
