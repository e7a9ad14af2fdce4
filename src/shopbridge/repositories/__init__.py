from shopbridge.repositories.base import BaseRepository
from shopbridge.repositories.cart_repository import CartRepository
from shopbridge.repositories.client_repository import ClientRepository
from shopbridge.repositories.product_repository import ProductRepository

__all__ = ["BaseRepository", "CartRepository", "ClientRepository", "ProductRepository"]
