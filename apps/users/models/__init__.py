"""
User models module.

All models are exported from this module.
"""
from .user import User
from .address import Address

__all__ = [
    'User',
    'Address',
]
