# elite_cards/models/__init__.py
from .user import User
from .product import Product, ProductVariant
from .added_product import AddedProduct

__all__ = ["User", "Product", "ProductVariant", "AddedProduct"]
