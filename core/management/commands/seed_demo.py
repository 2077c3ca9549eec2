"""
Management command to populate the database with demo data.

Builds on ``ensure_test_users`` and goes through the service layer so
that numbering, stock ledger entries and invoice totals come out the
same way the API would produce them.
"""
from datetime import date
from decimal import Decimal

from django.core.management import call_command
from django.core.management.base import BaseCommand
from django.db import transaction

from core.models import Hospital, InventoryTransaction, Product, User
from core.services import catalog, inventory, invoices, payments, purchase_orders
from core.services.animals import register_animal

CATEGORIES = ['의약품', '백신', '소모품', '사료']

SUPPLIERS = [
    {'name': '한빛동물약품', 'contactPerson': '김영업', 'phone': '02-555-0101', 'paymentTerms': '월말 정산'},
    {'name': '펫케어유통', 'contactPerson': '이담당', 'phone': '031-777-0202', 'paymentTerms': '선결제'},
]

# name, type, unit, category index, cost, price, min stock, opening stock
PRODUCTS = [
    ('아목시실린 250mg', 'MEDICATION', 'EA', 0, '300', '1000', 50, 200),
    ('종합백신 DHPPL', 'VACCINE', 'DOSE', 1, '8000', '25000', 10, 40),
    ('광견병 백신', 'VACCINE', 'DOSE', 1, '6000', '20000', 10, 8),
    ('주사기 3ml', 'SUPPLIES', 'BOX', 2, '5000', '0', 5, 30),
    ('처방식 사료 2kg', 'FOOD', 'EA', 3, '18000', '32000', 5, 12),
]

ANIMALS = [
    {'name': '초코', 'species': 'DOG', 'breed': '푸들', 'gender': 'MALE', 'birthDate': date(2020, 3, 14)},
    {'name': '나비', 'species': 'CAT', 'breed': '코리안숏헤어', 'gender': 'FEMALE', 'birthDate': date(2021, 7, 2)},
]


class Command(BaseCommand):
    help = 'Populate database with demo data'

    def handle(self, *args, **options):
        call_command('ensure_test_users', stdout=self.stdout)
        hospital = Hospital.objects.get(business_number='000-00-00000')
        if Product.objects.filter(hospital=hospital).exists():
            self.stdout.write(self.style.WARNING('데모 데이터가 이미 있습니다. 건너뜁니다.'))
            return

        admin = User.objects.get(username='admin1')
        guardian = User.objects.get(username='guardian1')

        with transaction.atomic():
            products = self.create_catalog(admin, hospital)
            self.create_order(admin, hospital, products)
            self.create_billing(admin, hospital, guardian)

        self.stdout.write(self.style.SUCCESS('데모 데이터 생성 완료'))

    def create_catalog(self, user, hospital):
        categories = [catalog.create_category(hospital.id, {'name': name}) for name in CATEGORIES]
        suppliers = [catalog.create_supplier(hospital.id, data) for data in SUPPLIERS]
        products = []
        for idx, (name, ptype, unit, cat, cost, price, min_stock, opening) in enumerate(PRODUCTS):
            p = catalog.create_product(hospital.id, {
                'name': name, 'type': ptype, 'unit': unit,
                'categoryId': categories[cat].id, 'supplierId': suppliers[idx % len(suppliers)].id,
                'costPrice': Decimal(cost), 'sellingPrice': Decimal(price), 'minStockLevel': min_stock,
            })
            inventory.create_transaction(user, hospital.id, p.id, InventoryTransaction.TYPE_INITIAL, opening,
                                         unit_cost=Decimal(cost), notes='기초 재고')
            products.append(p)
            self.stdout.write(f'품목 생성: {p.code} {p.name}')
        return products

    def create_order(self, user, hospital, products):
        low = [p for p in products if inventory.total_stock(p) <= p.min_stock_level]
        if not low:
            return
        order = purchase_orders.create_purchase_order(user, hospital.id, {
            'supplierId': low[0].supplier_id,
            'notes': '재고 부족 품목 발주',
            'items': [{'productId': p.id, 'quantity': p.min_stock_level * 2, 'unitPrice': p.cost_price} for p in low],
        })
        purchase_orders.approve_purchase_order(user, order.id)
        self.stdout.write(f'발주서 생성: {order.order_number}')

    def create_billing(self, user, hospital, guardian):
        for data in ANIMALS:
            animal = register_animal(user, dict(data, guardianId=guardian.id))
            inv = invoices.create_invoice(user, {
                'hospitalId': hospital.id, 'animalId': animal.id, 'guardianId': guardian.id,
                'items': [
                    {'type': 'CONSULTATION', 'name': '일반 진료', 'quantity': 1, 'unitPrice': Decimal('15000')},
                    {'type': 'VACCINATION', 'name': '종합백신 접종', 'quantity': 1, 'unitPrice': Decimal('25000'),
                     'discountRate': Decimal('10')},
                ],
            })
            payments.create_payment(user, inv.id, Decimal('20000'), 'CARD', card_number='1234567812345678',
                                    card_company='국민카드')
            self.stdout.write(f'청구서 생성: {inv.invoice_number} ({animal.name})')
