"""
Product services module.
"""
from .inventory_ledger import InventoryLedger

__all__ = [
    'InventoryLedger',
]
