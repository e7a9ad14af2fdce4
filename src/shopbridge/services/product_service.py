import logging
from typing import Any, List, Optional

from shopbridge.core.exceptions import NotFoundError
from shopbridge.models.product import Product
from shopbridge.repositories.product_repository import ProductRepository
from shopbridge.utils.validators import ValidationUtils

logger = logging.getLogger(__name__)


class ProductService:
    """
    Read-only catalog access

    Business Rules:
    - Only products flagged available are listed
    - Filters are case-insensitive partial matches
    """

    def __init__(self, product_repository: ProductRepository):
        self.product_repo = product_repository

    def list_products(self, name: Optional[str] = None, description: Optional[str] = None) -> List[Product]:
        name = ValidationUtils.clean_optional(name)
        description = ValidationUtils.clean_optional(description)
        logger.info(f"Listing products (name={name!r}, description={description!r})")

        products = self.product_repo.list_products(name=name, description=description)

        logger.info(f"Found {len(products)} products")
        return products

    def get_product(self, product_id: Any) -> Product:
        product_id = ValidationUtils.parse_positive_int(product_id, "ID de producto inválido")

        product = self.product_repo.get_by_id(product_id)
        if product is None:
            logger.warning(f"Product {product_id} not found")
            raise NotFoundError(f"No se encontró ningún producto con el ID {product_id}")
        return product

    @staticmethod
    def listing_message(products: List[Product]) -> str:
        if not products:
            return "No se encontraron productos con los filtros especificados."
        return f"Se encontraron {len(products)} producto(s)"
