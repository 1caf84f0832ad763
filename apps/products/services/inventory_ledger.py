"""
Inventory ledger: stock reservation and restoration.

Stock only moves through conditional ``UPDATE`` statements evaluated by the
database, so two concurrent reservations can never drive a counter below
zero even when they race between the read and the write.
"""
import logging
from typing import Dict, Iterable

from django.db.models import F

from apps.common.exceptions import InsufficientStock, ProductUnavailable
from ..models import Product

logger = logging.getLogger(__name__)


class InventoryLedger:
    """Reserve and restore product stock inside the caller's transaction"""

    @staticmethod
    def lock_products(product_ids: Iterable[int]) -> Dict[int, Product]:
        """
        Lock the given product rows in ascending id order and return them by id.
        Must run inside ``transaction.atomic``.
        """
        ids = sorted(set(product_ids))
        products = Product.objects.select_for_update().filter(id__in=ids).order_by('id')
        found = {product.id: product for product in products}
        missing = [pid for pid in ids if pid not in found]
        if missing:
            raise ProductUnavailable(f"Product {missing[0]} is not available", product_id=missing[0])
        return found

    @staticmethod
    def reserve(product: Product, quantity: int) -> None:
        """Decrement stock by ``quantity`` or raise ``InsufficientStock``."""
        updated = Product.objects.filter(
            id=product.id, stock_quantity__gte=quantity
        ).update(stock_quantity=F('stock_quantity') - quantity)

        if updated == 0:
            current = Product.objects.filter(id=product.id).values_list('stock_quantity', flat=True).first()
            raise InsufficientStock(product.name, current or 0, quantity)

        logger.debug(f"Reserved {quantity} of product {product.id}")

    @staticmethod
    def restore(product_id: int, quantity: int) -> None:
        Product.objects.filter(id=product_id).update(stock_quantity=F('stock_quantity') + quantity)
        logger.debug(f"Restored {quantity} of product {product_id}")

    @staticmethod
    def restore_order(order) -> None:
        """Return every line of ``order`` to stock."""
        for item in order.items.all():
            InventoryLedger.restore(item.product_id, item.quantity)
        logger.info(f"Restored inventory for order {order.order_number}")
