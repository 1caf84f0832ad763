"""
Tests for stock reservation and restoration.
"""
from django.db import transaction
from django.test import TestCase

from apps.common.exceptions import InsufficientStock, ProductUnavailable
from apps.products.services import InventoryLedger
from tests.factories import AddressFactory, ProductFactory, UserFactory, place_order


class InventoryLedgerTest(TestCase):

    def test_reserve_decrements_stock(self):
        product = ProductFactory(stock_quantity=5)

        InventoryLedger.reserve(product, 3)

        product.refresh_from_db()
        self.assertEqual(product.stock_quantity, 2)

    def test_reserve_can_take_the_last_unit(self):
        product = ProductFactory(stock_quantity=1)

        InventoryLedger.reserve(product, 1)

        product.refresh_from_db()
        self.assertEqual(product.stock_quantity, 0)

    def test_reserve_refuses_to_go_negative(self):
        product = ProductFactory(name='Rose Serum', stock_quantity=2)

        with self.assertRaises(InsufficientStock) as ctx:
            InventoryLedger.reserve(product, 3)

        self.assertIn('Rose Serum', ctx.exception.message)
        self.assertEqual(ctx.exception.extra['available'], 2)
        product.refresh_from_db()
        self.assertEqual(product.stock_quantity, 2)

    def test_reserve_uses_current_stock_not_stale_instance(self):
        product = ProductFactory(stock_quantity=5)
        stale = type(product).objects.get(pk=product.pk)
        InventoryLedger.reserve(product, 4)

        with self.assertRaises(InsufficientStock):
            InventoryLedger.reserve(stale, 4)

    def test_restore_adds_stock_back(self):
        product = ProductFactory(stock_quantity=0)

        InventoryLedger.restore(product.id, 4)

        product.refresh_from_db()
        self.assertEqual(product.stock_quantity, 4)

    def test_lock_products_returns_rows_by_id(self):
        first, second = ProductFactory(), ProductFactory()

        with transaction.atomic():
            locked = InventoryLedger.lock_products([second.id, first.id, second.id])

        self.assertEqual(set(locked), {first.id, second.id})

    def test_lock_products_rejects_unknown_ids(self):
        with self.assertRaises(ProductUnavailable):
            with transaction.atomic():
                InventoryLedger.lock_products([987654])

    def test_restore_order_returns_every_line(self):
        user = UserFactory()
        address = AddressFactory(user=user)
        serum, cream = ProductFactory(stock_quantity=10), ProductFactory(stock_quantity=10)
        order = place_order(user, address, [(serum, 2), (cream, 3)])

        InventoryLedger.restore_order(order)

        serum.refresh_from_db()
        cream.refresh_from_db()
        self.assertEqual(serum.stock_quantity, 10)
        self.assertEqual(cream.stock_quantity, 10)
